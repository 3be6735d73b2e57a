from sqlalchemy import Boolean, Column, String, Text
from sqlalchemy.orm import relationship
from steward.core.database import Base
from steward.models.base import IdMixin, TimestampMixin

class User(Base, IdMixin, TimestampMixin):
    """
    A dashboard user; maintainers are the subjects of the analytics.
    """
    __tablename__ = "users"

    github_username = Column(String(100), unique=True, nullable=False, index=True)
    github_id = Column(String(50))
    name = Column(String(200))
    email = Column(String(200))
    avatar_url = Column(String(500))
    bio = Column(Text)
    location = Column(String(200))
    website = Column(String(500))
    twitter = Column(String(100))
    linkedin = Column(String(200))
    is_maintainer = Column(Boolean, nullable=False, default=True)

    repositories = relationship("Repository", back_populates="user")
    pr_reviews = relationship("PRReview", back_populates="user")
    issue_triage = relationship("IssueTriage", back_populates="user")
    mentorship = relationship("MentorshipActivity", back_populates="user")
    contributions = relationship("Contribution", back_populates="user")
    community_impact = relationship("CommunityImpact", back_populates="user")
