from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from slotbook.auth.dependencies import require_admin
from slotbook.database import get_db
from slotbook.services.settings_store import SettingsStore

router = APIRouter(tags=['settings'])


class SettingRequest(BaseModel):
    key: str | None = None
    value: str | None = None


class SettingResponse(BaseModel):
    key: str
    value: str | None = None

    class Config:
        from_attributes = True


@router.get('', response_model=list[SettingResponse])
def list_settings(db: Session = Depends(get_db)):
    return SettingsStore(db).list_settings()


@router.post('')
def save_setting(
    data: SettingRequest,
    db: Session = Depends(get_db),
    _admin: dict = Depends(require_admin),
):
    SettingsStore(db).upsert(data.key, data.value)
    return {'success': True}
