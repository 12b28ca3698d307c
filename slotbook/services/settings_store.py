import logging

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from slotbook.core.errors import invalid_input, storage_failure
from slotbook.models.setting import Setting

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}


class SettingsStore:
    def __init__(self, db: Session):
        self.db = db

    def list_settings(self) -> list[Setting]:
        try:
            return self.db.query(Setting).order_by(Setting.key.asc()).all()
        except SQLAlchemyError as exc:
            logger.exception('Failed to fetch settings')
            raise storage_failure('Failed to fetch settings') from exc

    def upsert(self, key: str | None, value: str | None) -> None:
        if not key or value is None:
            raise invalid_input('Key and value are required')

        try:
            dialect_name = self.db.get_bind().dialect.name
            insert = _UPSERT_DIALECTS.get(dialect_name)
            if insert is not None:
                statement = insert(Setting).values(key=key, value=value)
                statement = statement.on_conflict_do_update(
                    index_elements=[Setting.key],
                    set_={'value': statement.excluded.value},
                )
                self.db.execute(statement)
            else:
                setting = self.db.query(Setting).filter(Setting.key == key).first()
                if setting is None:
                    self.db.add(Setting(key=key, value=value))
                else:
                    setting.value = value
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Failed to save setting %s', key)
            raise storage_failure('Failed to save setting') from exc

        logger.info('Setting %s updated', key)
