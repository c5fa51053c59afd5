"""SQLAlchemy ORM models for alert acknowledgements"""

import uuid
from sqlalchemy import Column, String, DateTime, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class HandledReminderRecord(Base):
    """User action on an alert for one month ("M-YYYY")"""

    __tablename__ = "handled_reminder"
    __table_args__ = (UniqueConstraint("user_id", "reminder_id", "month_year", name="uq_handled_reminder"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Text, nullable=False, index=True)
    reminder_id = Column(Text, nullable=False)
    month_year = Column(String(7), nullable=False)
    action = Column(String(16), nullable=False)  # COMPLETED | DISMISSED
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
