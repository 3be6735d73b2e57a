from sqlalchemy import Column, Date, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from steward.core.database import Base
from steward.models.base import IdMixin, TimestampMixin

class CommunityImpact(Base, IdMixin, TimestampMixin):
    """
    Periodic community impact scores for a maintainer.
    """
    __tablename__ = "community_impact"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    period = Column(String(10), nullable=False, default="MONTHLY")  # WEEKLY, MONTHLY, YEARLY
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    maintainer_score = Column(Float, nullable=False, default=0.0)
    community_score = Column(Float, nullable=False, default=0.0)
    leadership_score = Column(Float, nullable=False, default=0.0)

    user = relationship("User", back_populates="community_impact")
