import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from slotbook.core import config
from slotbook.core.errors import register_error_handlers
from slotbook.database import Base, engine, ensure_signup_schema, ensure_time_slot_schema
from slotbook.models import setting, signup, time_slot  # noqa: F401
from slotbook.routes import auth_routes, settings_routes, signup_routes, slot_routes

logging.basicConfig(level=config.LOG_LEVEL)

app = FastAPI(title='slotbook')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

register_error_handlers(app)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_time_slot_schema()
        ensure_signup_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and credentials.')


@app.get('/')
def root():
    return {'status': 'Slotbook API Running'}


app.include_router(auth_routes.router)
app.include_router(slot_routes.router, prefix='/slots')
app.include_router(signup_routes.router)
app.include_router(settings_routes.router, prefix='/settings')
