from sqlalchemy import Column, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from steward.core.database import Base
from steward.models.base import IdMixin, TimestampMixin

class PRReview(Base, IdMixin, TimestampMixin):
    """
    A pull request review written by a maintainer, with its scored sentiment.
    """
    __tablename__ = "pr_reviews"
    __table_args__ = (
        UniqueConstraint("github_review_id", name="uq_pr_reviews_github_review_id"),
    )

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    repository_id = Column(Integer, ForeignKey("repositories.id"), index=True)
    github_review_id = Column(String(50))
    pr_number = Column(Integer, nullable=False)
    title = Column(String(500))
    body = Column(Text)
    state = Column(String(30))  # APPROVED, CHANGES_REQUESTED, COMMENTED
    sentiment = Column(String(10), index=True)  # POSITIVE, NEUTRAL, NEGATIVE
    sentiment_score = Column(Float)
    url = Column(String(500))

    user = relationship("User", back_populates="pr_reviews")
    repository = relationship("Repository", back_populates="pr_reviews")
