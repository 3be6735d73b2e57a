from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from steward.core.database import Base
from steward.models.base import IdMixin, TimestampMixin

class Issue(Base, IdMixin, TimestampMixin):
    """
    A GitHub issue in a tracked repository.
    """
    __tablename__ = "issues"

    repository_id = Column(Integer, ForeignKey("repositories.id"), nullable=False, index=True)
    number = Column(Integer, nullable=False)
    title = Column(String(500))
    body = Column(Text)
    state = Column(String(10))  # open, closed
    labels = Column(String(500))  # comma separated label names
    url = Column(String(500), index=True)

    repository = relationship("Repository", back_populates="issues")
    triage = relationship("IssueTriage", back_populates="issue")
