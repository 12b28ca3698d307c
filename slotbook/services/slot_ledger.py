"""Slot ledger: the single authority on time slot existence and status.

Every write keeps the pairing between ``status`` and ``booked_by`` intact: a
slot is ``available`` exactly when nobody holds a claim on it. The only
exception is an admin confirming an unclaimed slot directly.
"""

import datetime
import logging
from dataclasses import dataclass
from datetime import date, time
from typing import Iterable

from sqlalchemy import and_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from slotbook.core.errors import ErrorKind, ServiceError, invalid_input, storage_failure
from slotbook.models.time_slot import SlotStatus, TimeSlot

logger = logging.getLogger(__name__)

VALID_STATUSES = {slot_status.value for slot_status in SlotStatus}


@dataclass
class SlotSpec:
    date: datetime.date | None = None
    start_time: time | None = None
    end_time: time | None = None

    def is_complete(self) -> bool:
        return self.date is not None and self.start_time is not None and self.end_time is not None


@dataclass
class BulkResult:
    created: int = 0
    skipped: int = 0


class SlotLedger:
    def __init__(self, db: Session):
        self.db = db

    def list_slots(
        self,
        start: date | None = None,
        end: date | None = None,
        available_only: bool = False,
    ) -> list[TimeSlot]:
        query = self.db.query(TimeSlot)

        if start is not None:
            query = query.filter(TimeSlot.date >= start)
        if end is not None:
            query = query.filter(TimeSlot.date <= end)
        if available_only:
            query = query.filter(TimeSlot.status == SlotStatus.AVAILABLE.value)

        try:
            return query.order_by(TimeSlot.date.asc(), TimeSlot.start_time.asc()).all()
        except SQLAlchemyError as exc:
            logger.exception('Failed to fetch slots')
            raise storage_failure('Failed to fetch slots') from exc

    def get(self, slot_id: int) -> TimeSlot:
        slot = self.db.query(TimeSlot).filter(TimeSlot.id == slot_id).first()
        if slot is None:
            raise ServiceError(ErrorKind.NOT_FOUND, 'Slot not found')
        return slot

    def _exists(self, slot_date: date, start_time: time) -> bool:
        return self.db.query(TimeSlot.id).filter(
            TimeSlot.date == slot_date,
            TimeSlot.start_time == start_time,
        ).first() is not None

    def create(self, slot_date: date | None, start_time: time | None, end_time: time | None) -> TimeSlot:
        if not SlotSpec(slot_date, start_time, end_time).is_complete():
            raise invalid_input('Date, start_time, and end_time are required')

        try:
            if self._exists(slot_date, start_time):
                raise ServiceError(ErrorKind.CONFLICT, 'Slot already exists')

            slot = TimeSlot(
                date=slot_date,
                start_time=start_time,
                end_time=end_time,
                status=SlotStatus.AVAILABLE.value,
                booked_by=None,
            )
            self.db.add(slot)
            self.db.commit()
            self.db.refresh(slot)
        except IntegrityError as exc:
            # lost a race against an identical insert
            self.db.rollback()
            raise ServiceError(ErrorKind.CONFLICT, 'Slot already exists') from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Failed to create slot')
            raise storage_failure('Failed to create slot') from exc

        logger.info('Created slot %s on %s at %s', slot.id, slot.date, slot.start_time)
        return slot

    def create_bulk(self, specs: Iterable[SlotSpec]) -> BulkResult:
        specs = list(specs)
        if not specs:
            raise invalid_input('Slots array is required')

        result = BulkResult()
        try:
            for spec in specs:
                if not spec.is_complete() or self._exists(spec.date, spec.start_time):
                    result.skipped += 1
                    continue

                self.db.add(TimeSlot(
                    date=spec.date,
                    start_time=spec.start_time,
                    end_time=spec.end_time,
                    status=SlotStatus.AVAILABLE.value,
                    booked_by=None,
                ))
                try:
                    self.db.commit()
                except IntegrityError:
                    self.db.rollback()
                    result.skipped += 1
                    continue
                result.created += 1
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Failed to create slots after %s created', result.created)
            raise storage_failure('Failed to create slots') from exc

        logger.info('Bulk slot creation: %s created, %s skipped', result.created, result.skipped)
        return result

    def delete(self, slot_id: int) -> None:
        try:
            deleted = self.db.query(TimeSlot).filter(
                TimeSlot.id == slot_id,
                TimeSlot.status == SlotStatus.AVAILABLE.value,
            ).delete(synchronize_session=False)

            if deleted == 0:
                self.db.rollback()
                self.get(slot_id)
                raise ServiceError(
                    ErrorKind.INVALID_STATE,
                    'Cannot delete a slot that is pending or confirmed',
                )

            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Failed to delete slot %s', slot_id)
            raise storage_failure('Failed to delete slot') from exc

        logger.info('Deleted slot %s', slot_id)

    def set_status(self, slot_id: int, new_status: str | None, booked_by: int | None = None) -> TimeSlot:
        if not new_status:
            raise invalid_input('Status is required')
        if new_status not in VALID_STATUSES:
            raise invalid_input('Invalid status. Must be: available, pending, or confirmed')

        try:
            slot = self.get(slot_id)

            slot.status = new_status
            if new_status == SlotStatus.AVAILABLE.value:
                slot.booked_by = None
            elif booked_by is not None:
                slot.booked_by = booked_by

            self.db.commit()
            self.db.refresh(slot)
        except IntegrityError as exc:
            self.db.rollback()
            raise invalid_input('booked_by must reference an existing signup') from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Failed to update slot %s', slot_id)
            raise storage_failure('Failed to update slot') from exc

        logger.info('Slot %s set to %s (booked_by=%s)', slot.id, slot.status, slot.booked_by)
        return slot

    def lock_for_claim(self, slot_ids: list[int]) -> list[TimeSlot]:
        """Load the requested slots, row-locked where the database supports it.

        Does not commit; the caller owns the surrounding transaction.
        """
        return self.db.query(TimeSlot).filter(TimeSlot.id.in_(slot_ids)).with_for_update().all()

    def claim(self, slot_ids: list[int], signup_id: int) -> int:
        """Move every still-available slot in ``slot_ids`` to pending for ``signup_id``.

        A single conditional UPDATE, so a slot another transaction already
        claimed is left alone. Returns how many rows were claimed; does not
        commit.
        """
        statement = (
            update(TimeSlot)
            .where(and_(
                TimeSlot.id.in_(slot_ids),
                TimeSlot.status == SlotStatus.AVAILABLE.value,
            ))
            .values(status=SlotStatus.PENDING.value, booked_by=signup_id)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(statement).rowcount
