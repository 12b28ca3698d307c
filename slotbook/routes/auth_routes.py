import hmac
import logging

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from slotbook.auth import jwt_handler
from slotbook.auth.dependencies import require_admin
from slotbook.core import config
from slotbook.core.errors import ErrorKind, ServiceError

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    password: str | None = None


def password_matches(candidate: str | None) -> bool:
    if not config.ADMIN_PASSWORD or candidate is None:
        return False
    return hmac.compare_digest(candidate.encode(), config.ADMIN_PASSWORD.encode())


@router.post('/login')
def login(data: LoginRequest, response: Response):
    if not password_matches(data.password):
        logger.warning('Rejected admin login attempt')
        raise ServiceError(ErrorKind.UNAUTHORIZED, 'Invalid password')

    token = jwt_handler.create_session_token()
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=token,
        max_age=config.SESSION_EXPIRES_MINUTES * 60,
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite='lax',
    )
    return {'success': True, 'access_token': token, 'token_type': 'bearer'}


@router.post('/logout')
def logout(response: Response):
    response.delete_cookie(config.SESSION_COOKIE_NAME)
    return {'success': True}


@router.get('/session')
def session(user: dict = Depends(require_admin)):
    return {'user': user}
