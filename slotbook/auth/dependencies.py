import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from slotbook.auth import jwt_handler
from slotbook.core import config
from slotbook.core.errors import ErrorKind, ServiceError

security = HTTPBearer(auto_error=False)


def _session_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(config.SESSION_COOKIE_NAME)


def get_session_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict | None:
    token = _session_token(request, credentials)
    if not token:
        return None
    try:
        payload = jwt_handler.decode_session_token(token)
    except jwt.PyJWTError:
        return None

    user = payload.get("user")
    return user if isinstance(user, dict) else None


def require_admin(user: dict | None = Depends(get_session_user)) -> dict:
    if not user or user.get("role") != jwt_handler.ADMIN_ROLE:
        raise ServiceError(ErrorKind.UNAUTHORIZED, "Unauthorized")
    return user
