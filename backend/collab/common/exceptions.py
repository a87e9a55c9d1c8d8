from typing import Any

import sentry_sdk
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger


class InternalException(Exception):
    """
    All internal exceptions should inherit from this. We are handled
    vaguely publicly
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal failure.'
    default_code = 'internal_failure'

    def __init__(self, message: str | None = None, context: dict[Any, Any] | Any = None):
        self.message = message or self.default_detail
        self.context = context or dict()

    def __str__(self) -> str:
        return f'{self.__class__.__name__}({self.message})'


class APIException(Exception):
    """
    API view layer exceptions
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid Request.'
    default_code = 'invalid_request'

    # Match the internal interface message
    def __init__(self, message: str | None = None, code: int | None = None, error_type: str | None = None):
        self.message = message or self.default_detail
        self.code = code or self.status_code
        self.error_type = error_type


async def internal_exception_handler(request: Request, exc: InternalException) -> JSONResponse:
    """
    Internal detail stays in the logs, callers only get the default detail
    """
    logger.opt(exception=exc).error(f'{exc}', context=exc.context)
    sentry_sdk.capture_exception(exc)
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder({'detail': InternalException.default_detail}),
    )


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    """
    This catches view layer errors and is registered at the app level
    """
    content = {'detail': exc.message}
    if exc.error_type:
        content['error_type'] = exc.error_type
    return JSONResponse(
        status_code=exc.code,
        content=jsonable_encoder(content),
    )


async def inbound_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    This catches pydantic validation errors and is registered at the app level
    """
    details = exc.errors()
    modified_details = []
    for error in details:
        modified_details.append(
            {
                'loc': error['loc'],
                'message': error['msg'],
                'input': error.get('input'),
                'type': error['type'],
            }
        )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder({'detail': modified_details, 'error_type': 'VALIDATION'}),
    )
