"""Data access layer for handled reminders"""

from typing import List, Optional
from sqlalchemy.orm import Session
from cycle_ledger.infrastructure.database.models import HandledReminderRecord
from cycle_ledger.domain.models import HandledReminder


class HandledReminderRepository:
    """Repository for alert acknowledgements"""

    def __init__(self, db: Session):
        self.db = db

    def record_action(self, user_id: str, reminder: HandledReminder) -> HandledReminderRecord:
        """
        Persist an acknowledgement; a repeat for the same reminder and month
        overwrites the earlier action instead of duplicating it.
        """
        existing = self._find(user_id, reminder.reminder_id, reminder.month_year)
        if existing is not None:
            existing.action = reminder.action
            self.db.flush()
            return existing

        record = HandledReminderRecord(
            user_id=user_id,
            reminder_id=reminder.reminder_id,
            month_year=reminder.month_year,
            action=reminder.action,
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return record

    def list_for_user(self, user_id: str) -> List[HandledReminder]:
        """All acknowledgements for a user, oldest first"""
        records = (
            self.db.query(HandledReminderRecord)
            .filter(HandledReminderRecord.user_id == user_id)
            .order_by(HandledReminderRecord.created_at.asc())
            .all()
        )
        return [
            HandledReminder(reminder_id=r.reminder_id, month_year=r.month_year, action=r.action)
            for r in records
        ]

    def _find(self, user_id: str, reminder_id: str, month_year: str) -> Optional[HandledReminderRecord]:
        return (
            self.db.query(HandledReminderRecord)
            .filter(
                HandledReminderRecord.user_id == user_id,
                HandledReminderRecord.reminder_id == reminder_id,
                HandledReminderRecord.month_year == month_year,
            )
            .first()
        )
