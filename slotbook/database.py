from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from slotbook.core import config
from slotbook.core.errors import storage_failure


def _connect_args(database_url: str) -> dict:
    if database_url.startswith('sqlite'):
        return {'check_same_thread': False}
    return {}


engine = create_engine(config.DATABASE_URL, connect_args=_connect_args(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_time_slot_schema_checked = False
_signup_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_time_slot_schema() -> None:
    global _time_slot_schema_checked

    if _time_slot_schema_checked:
        return

    with _schema_lock:
        if _time_slot_schema_checked:
            return

        inspector = inspect(engine)

        if 'time_slots' not in inspector.get_table_names():
            _time_slot_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('time_slots')}
        migration_steps = [
            ('status', "ALTER TABLE time_slots ADD COLUMN status VARCHAR NOT NULL DEFAULT 'available'"),
            ('booked_by', 'ALTER TABLE time_slots ADD COLUMN booked_by INTEGER'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE UNIQUE INDEX IF NOT EXISTS uq_time_slots_date_start ON time_slots(date, start_time)')
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_time_slots_status_date ON time_slots(status, date)')
            )

        _time_slot_schema_checked = True


def ensure_signup_schema() -> None:
    global _signup_schema_checked

    if _signup_schema_checked:
        return

    with _schema_lock:
        if _signup_schema_checked:
            return

        inspector = inspect(engine)

        if 'signups' not in inspector.get_table_names():
            _signup_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('signups')}
        migration_steps = [
            ('location', 'ALTER TABLE signups ADD COLUMN location VARCHAR'),
            ('availability', 'ALTER TABLE signups ADD COLUMN availability VARCHAR'),
            ('selected_slots', 'ALTER TABLE signups ADD COLUMN selected_slots JSON'),
            ('no_availability', 'ALTER TABLE signups ADD COLUMN no_availability BOOLEAN NOT NULL DEFAULT FALSE'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_signups_created_at ON signups(created_at)')
            )

        _signup_schema_checked = True


def ensure_database_ready() -> None:
    try:
        ensure_time_slot_schema()
        ensure_signup_schema()
    except SQLAlchemyError as exc:
        raise storage_failure('Database unavailable. Verify DATABASE_URL and credentials.') from exc
