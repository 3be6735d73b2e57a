from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from steward.core.database import Base
from steward.models.base import IdMixin, TimestampMixin

class MentorshipActivity(Base, IdMixin, TimestampMixin):
    """
    A mentoring interaction between a maintainer and a contributor.
    """
    __tablename__ = "mentorship_activities"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    contributor_id = Column(Integer, ForeignKey("contributors.id"), index=True)
    type = Column(String(30), nullable=False, index=True)  # CODE_REVIEW, GUIDANCE, COLLABORATION, FEEDBACK
    impact = Column(String(10), index=True)  # HIGH, MEDIUM, LOW
    description = Column(Text)
    url = Column(String(500))

    user = relationship("User", back_populates="mentorship")
    contributor = relationship("Contributor", back_populates="mentorship")
