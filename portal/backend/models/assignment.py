import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from portal.backend.db.base_class import Base


def _now():
    return datetime.now(timezone.utc)


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    teacher_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default="draft")

    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)

    teacher = relationship("User", back_populates="assignments")

    submissions = relationship("Submission", back_populates="assignment", cascade="all, delete-orphan")
