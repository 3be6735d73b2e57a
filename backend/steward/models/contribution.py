from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from steward.core.database import Base
from steward.models.base import IdMixin, TimestampMixin

class Contribution(Base, IdMixin, TimestampMixin):
    """
    A single contribution (commit, PR, issue, review, docs) to a repository.
    """
    __tablename__ = "contributions"

    user_id = Column(Integer, ForeignKey("users.id"), index=True)
    contributor_id = Column(Integer, ForeignKey("contributors.id"), index=True)
    repository_id = Column(Integer, ForeignKey("repositories.id"), nullable=False, index=True)
    type = Column(String(30), nullable=False)  # COMMIT, PULL_REQUEST, ISSUE, REVIEW, DOCUMENTATION
    title = Column(String(500))
    description = Column(Text)
    url = Column(String(500))

    user = relationship("User", back_populates="contributions")
    contributor = relationship("Contributor", back_populates="contributions")
    repository = relationship("Repository")
