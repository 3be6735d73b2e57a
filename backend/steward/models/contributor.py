from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship
from steward.core.database import Base
from steward.models.base import IdMixin, TimestampMixin, utc_now

class Contributor(Base, IdMixin, TimestampMixin):
    """
    An external contributor to a maintainer's repositories.
    """
    __tablename__ = "contributors"

    github_username = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(200))
    email = Column(String(200))
    avatar_url = Column(String(500))
    first_contribution = Column(DateTime, default=utc_now)
    is_active = Column(Boolean, nullable=False, default=True)

    contributions = relationship("Contribution", back_populates="contributor")
    mentorship = relationship("MentorshipActivity", back_populates="contributor")
