import datetime
from datetime import date, time

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from slotbook.auth.dependencies import require_admin
from slotbook.database import ensure_database_ready, get_db
from slotbook.services.slot_ledger import SlotLedger, SlotSpec

router = APIRouter(tags=['slots'])

_date_adapter = TypeAdapter(datetime.date)
_time_adapter = TypeAdapter(datetime.time)


def _parse_or_none(adapter: TypeAdapter, value: str | None):
    if value is None or not value.strip():
        return None
    try:
        return adapter.validate_python(value.strip())
    except ValidationError:
        return None


class SlotSpecRequest(BaseModel):
    date: datetime.date | None = None
    start_time: time | None = None
    end_time: time | None = None


class BulkSlotItem(BaseModel):
    # parsed per item so one bad entry is skipped instead of failing the batch
    date: str | None = None
    start_time: str | None = None
    end_time: str | None = None

    def to_spec(self) -> SlotSpec:
        return SlotSpec(
            date=_parse_or_none(_date_adapter, self.date),
            start_time=_parse_or_none(_time_adapter, self.start_time),
            end_time=_parse_or_none(_time_adapter, self.end_time),
        )


class BulkCreateSlotsRequest(BaseModel):
    slots: list[BulkSlotItem] | None = None


class UpdateSlotRequest(BaseModel):
    status: str | None = None
    booked_by: int | None = None


class SlotResponse(BaseModel):
    id: int
    date: date
    start_time: time
    end_time: time
    status: str
    booked_by: int | None = None

    class Config:
        from_attributes = True


class BulkCreateSlotsResponse(BaseModel):
    success: bool = True
    created: int
    skipped: int


@router.get('', response_model=list[SlotResponse])
def list_slots(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    available_only: bool = Query(default=False),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    return SlotLedger(db).list_slots(start=start, end=end, available_only=available_only)


@router.post('', response_model=SlotResponse)
def create_slot(
    data: SlotSpecRequest,
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    ensure_database_ready()
    return SlotLedger(db).create(data.date, data.start_time, data.end_time)


@router.post('/bulk', response_model=BulkCreateSlotsResponse)
def create_slots_bulk(
    data: BulkCreateSlotsRequest,
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    ensure_database_ready()
    result = SlotLedger(db).create_bulk(spec.to_spec() for spec in data.slots or [])
    return BulkCreateSlotsResponse(created=result.created, skipped=result.skipped)


@router.patch('/{slot_id}', response_model=SlotResponse)
def update_slot_status(
    slot_id: int,
    data: UpdateSlotRequest,
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    ensure_database_ready()
    return SlotLedger(db).set_status(slot_id, data.status, booked_by=data.booked_by)


@router.delete('/{slot_id}')
def delete_slot(
    slot_id: int,
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    ensure_database_ready()
    SlotLedger(db).delete(slot_id)
    return {'success': True}
