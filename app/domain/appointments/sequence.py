"""Appointment number allocation

Numbers come from a durable counter row that is advanced with an optimistic
compare-and-set. A writer that loses the race gets SequenceContention and
simply tries again; nothing is locked.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import AppointmentSequence
from .exceptions import SequenceContention
from .repository import AppointmentRepository

logger = logging.getLogger(__name__)


class SequenceAllocator:
    """Reserves monotonically increasing sequence values for appointment numbers"""

    def __init__(self, name: str = "appointments", prefix: str = "APT-", width: int = 6):
        self.name = name
        self.prefix = prefix
        self.width = width

    def format_number(self, sequence: int) -> str:
        """APT-000042 style identifier for a sequence value"""
        return f"{self.prefix}{sequence:0{self.width}d}"

    def reserve(self, db: Session) -> int:
        """
        Reserve the next sequence value and commit the reservation.

        A reserved value is never handed out again, even if the insert that
        uses it later fails.

        Raises:
            SequenceContention: If a concurrent writer advanced the counter first
        """
        current = self._current_value(db)
        if current is None:
            current = self._seed(db)

        result = db.execute(
            update(AppointmentSequence)
            .where(
                AppointmentSequence.name == self.name,
                AppointmentSequence.value == current,
            )
            .values(value=current + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.rollback()
            raise SequenceContention(f"Sequence '{self.name}' moved past {current}")

        db.commit()
        return current + 1

    def _current_value(self, db: Session):
        return db.execute(
            select(AppointmentSequence.value).where(AppointmentSequence.name == self.name)
        ).scalar_one_or_none()

    def _seed(self, db: Session) -> int:
        """Create the counter row, starting after the appointments already stored"""
        existing = AppointmentRepository.count_appointments(db)
        db.add(AppointmentSequence(name=self.name, value=existing))
        try:
            db.commit()
        except IntegrityError:
            # Another writer created the row first; use its value
            db.rollback()
            return self._current_value(db)

        logger.info(f"🔢 Seeded sequence '{self.name}' at {existing}")
        return existing
