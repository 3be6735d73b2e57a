from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from steward.core.database import Base
from steward.models.base import IdMixin, TimestampMixin

class IssueTriage(Base, IdMixin, TimestampMixin):
    """
    A triage action (comment, label, close, ...) taken by a maintainer on an issue.
    """
    __tablename__ = "issue_triage"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    issue_id = Column(Integer, ForeignKey("issues.id"), index=True)
    action = Column(String(30), nullable=False, index=True)  # COMMENTED, LABELED, CLOSED, ...
    comment = Column(Text)
    github_comment_id = Column(String(50), unique=True)

    user = relationship("User", back_populates="issue_triage")
    issue = relationship("Issue", back_populates="triage")
