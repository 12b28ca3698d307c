from datetime import datetime, timedelta, timezone

import jwt

from slotbook.core import config

ADMIN_ROLE = "admin"


def create_session_token(role: str = ADMIN_ROLE, expires_minutes: int | None = None) -> str:
    expire_minutes = expires_minutes or config.SESSION_EXPIRES_MINUTES
    now = datetime.now(timezone.utc)
    payload = {
        "user": {"role": role},
        "exp": now + timedelta(minutes=expire_minutes),
        "iat": now,
    }
    return jwt.encode(payload, config.SESSION_SECRET_KEY, algorithm=config.SESSION_ALGORITHM)


def decode_session_token(token: str) -> dict:
    return jwt.decode(token, config.SESSION_SECRET_KEY, algorithms=[config.SESSION_ALGORITHM])
