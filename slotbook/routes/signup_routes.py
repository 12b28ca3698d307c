from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from slotbook.auth.dependencies import require_admin
from slotbook.database import ensure_database_ready, get_db
from slotbook.services.signup_intake import SignupIntake, SignupSubmission

router = APIRouter(tags=['signups'])

MAX_MESSAGE_LENGTH = 2000


class SignupRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    experience: float | None = None
    location: str | None = None
    availability: str | None = None
    selected_slots: list[int] = []
    no_availability: bool = False
    message: str | None = None

    @field_validator('name', 'phone', 'location', 'availability')
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().lower() or None

    @field_validator('message')
    @classmethod
    def validate_message(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_MESSAGE_LENGTH:
            raise ValueError(f'Message must be {MAX_MESSAGE_LENGTH} characters or fewer.')

        return normalized

    def to_submission(self) -> SignupSubmission:
        return SignupSubmission(**self.model_dump())


class SignupResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str | None = None
    experience: float | None = None
    location: str | None = None
    availability: str | None = None
    selected_slots: list[int] = []
    no_availability: bool = False
    message: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True

    @field_validator('selected_slots', mode='before')
    @classmethod
    def default_selected_slots(cls, value):
        # rows written before slot booking existed have no snapshot
        return value or []


@router.post('/signup')
def submit_signup(data: SignupRequest, db: Session = Depends(get_db)):
    ensure_database_ready()
    SignupIntake(db).submit(data.to_submission())
    return {'success': True}


@router.get('/signups', response_model=list[SignupResponse])
def list_signups(
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    ensure_database_ready()
    return SignupIntake(db).list_signups()
