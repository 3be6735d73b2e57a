from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from steward.core.database import Base
from steward.models.base import IdMixin, TimestampMixin

class Repository(Base, IdMixin, TimestampMixin):
    """
    A GitHub repository owned or maintained by a user.
    """
    __tablename__ = "repositories"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    full_name = Column(String(300), unique=True, nullable=False, index=True)
    description = Column(Text)
    url = Column(String(500))
    language = Column(String(50))
    stars = Column(Integer, nullable=False, default=0)
    forks = Column(Integer, nullable=False, default=0)
    open_issues = Column(Integer, nullable=False, default=0)
    is_private = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="repositories")
    pr_reviews = relationship("PRReview", back_populates="repository")
    issues = relationship("Issue", back_populates="repository")
    snapshots = relationship("RepositorySnapshot", back_populates="repository")
