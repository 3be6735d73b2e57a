from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer
from sqlalchemy.orm import relationship
from steward.core.database import Base
from steward.models.base import IdMixin, TimestampMixin, utc_now

class RepositorySnapshot(Base, IdMixin, TimestampMixin):
    """
    Point-in-time repository counters used for before/after health comparisons.
    """
    __tablename__ = "repository_snapshots"

    repository_id = Column(Integer, ForeignKey("repositories.id"), nullable=False, index=True)
    snapshot_date = Column(DateTime, nullable=False, default=utc_now, index=True)
    stars = Column(Integer, nullable=False, default=0)
    forks = Column(Integer, nullable=False, default=0)
    issues = Column(Integer, nullable=False, default=0)
    pull_requests = Column(Integer, nullable=False, default=0)
    contributors = Column(Integer, nullable=False, default=0)
    activity_score = Column(Float, nullable=False, default=0.0)

    repository = relationship("Repository", back_populates="snapshots")
