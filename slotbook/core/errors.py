"""Typed service errors and their mapping to HTTP responses."""

from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ErrorKind(str, Enum):
    INVALID_INPUT = 'invalid_input'
    UNAUTHORIZED = 'unauthorized'
    NOT_FOUND = 'not_found'
    CONFLICT = 'conflict'
    INVALID_STATE = 'invalid_state'
    STORAGE_FAILURE = 'storage_failure'


STATUS_CODES = {
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_STATE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.STORAGE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ServiceError(Exception):
    """Raised by services and auth when a request cannot be honoured."""

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


def invalid_input(message: str) -> ServiceError:
    return ServiceError(ErrorKind.INVALID_INPUT, message)


def storage_failure(message: str) -> ServiceError:
    return ServiceError(ErrorKind.STORAGE_FAILURE, message)


async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    # storage failures are already logged with a traceback by the raising service
    return JSONResponse(status_code=exc.status_code, content={'detail': exc.message})


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            'field': '.'.join(str(part) for part in error.get('loc', ()) if part != 'body'),
            'message': error.get('msg', 'Invalid value'),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'detail': 'Invalid request.', 'errors': errors},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
