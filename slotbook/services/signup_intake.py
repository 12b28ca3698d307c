"""Signup intake: validates a submission and reserves its slots in one unit."""

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from slotbook.core.errors import ServiceError, invalid_input, storage_failure
from slotbook.models.signup import Signup
from slotbook.models.time_slot import SlotStatus
from slotbook.services.slot_ledger import SlotLedger

logger = logging.getLogger(__name__)

MIN_EXPERIENCE = 1.0
MAX_EXPERIENCE = 8.0


@dataclass
class SignupSubmission:
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    experience: float | None = None
    location: str | None = None
    availability: str | None = None
    selected_slots: list[int] = field(default_factory=list)
    no_availability: bool = False
    message: str | None = None

    @property
    def books_slots(self) -> bool:
        """False for the free-text variant that only describes availability."""
        return bool(self.selected_slots) or self.no_availability or not self.availability


def _unique_in_order(slot_ids: list[int]) -> list[int]:
    return list(dict.fromkeys(slot_ids))


def validate_submission(submission: SignupSubmission) -> list[int]:
    """Check required fields and ranges; returns the slot ids to claim."""
    if not submission.name or not submission.email:
        raise invalid_input('Name and email are required')

    if submission.experience is not None and not (
        MIN_EXPERIENCE <= submission.experience <= MAX_EXPERIENCE
    ):
        raise invalid_input(f'Experience must be between {MIN_EXPERIENCE} and {MAX_EXPERIENCE}')

    if not submission.books_slots:
        return []

    if submission.experience is None or not submission.location:
        raise invalid_input('Experience and location are required')

    if submission.no_availability:
        return []

    slot_ids = _unique_in_order(submission.selected_slots)
    if not slot_ids:
        raise invalid_input('Select a time slot or indicate no availability')

    return slot_ids


class SignupIntake:
    def __init__(self, db: Session):
        self.db = db
        self.ledger = SlotLedger(db)

    def submit(self, submission: SignupSubmission) -> Signup:
        slot_ids = validate_submission(submission)

        try:
            if slot_ids:
                slots = self.ledger.lock_for_claim(slot_ids)
                if len(slots) != len(slot_ids):
                    raise invalid_input('One or more selected slots do not exist')
                if any(slot.status != SlotStatus.AVAILABLE.value for slot in slots):
                    raise invalid_input('One or more selected slots are no longer available')

            signup = Signup(
                name=submission.name,
                email=submission.email,
                phone=submission.phone,
                experience=submission.experience,
                location=submission.location,
                availability=submission.availability,
                selected_slots=slot_ids,
                no_availability=submission.no_availability,
                message=submission.message,
            )
            self.db.add(signup)
            self.db.flush()

            if slot_ids and self.ledger.claim(slot_ids, signup.id) != len(slot_ids):
                raise invalid_input('One or more selected slots are no longer available')

            self.db.commit()
        except ServiceError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Failed to save signup')
            raise storage_failure('Failed to save signup') from exc

        logger.info('Signup %s recorded, claimed slots %s', signup.id, slot_ids)
        return signup

    def list_signups(self) -> list[Signup]:
        try:
            return self.db.query(Signup).order_by(Signup.created_at.desc(), Signup.id.desc()).all()
        except SQLAlchemyError as exc:
            logger.exception('Failed to fetch signups')
            raise storage_failure('Failed to fetch signups') from exc
