"""
Tagged results returned by services for expected failures.

Services never raise for outcomes a caller can act on (missing resource,
duplicate, lost race). They return a ServiceResult carrying either the value
or a ServiceError whose kind the transport maps to a status code.
"""

from typing import Generic, Optional, TypeVar

from fastapi import status

from collab.common.domain import BaseDomain
from collab.common.enum import BaseEnum
from collab.common.exceptions import APIException

ValueType = TypeVar('ValueType')


class ErrorKindEnum(BaseEnum):
    # Malformed or missing input, rejected before touching storage
    VALIDATION = 'VALIDATION'
    # Resource absent or caller lacks permission, deliberately indistinguishable
    NOT_FOUND_OR_FORBIDDEN = 'NOT_FOUND_OR_FORBIDDEN'
    NOT_FOUND = 'NOT_FOUND'
    CONFLICT = 'CONFLICT'
    UPSTREAM_FAILURE = 'UPSTREAM_FAILURE'


class ServiceError(BaseDomain):
    kind: ErrorKindEnum
    message: str


class ServiceResult(BaseDomain, Generic[ValueType]):
    value: Optional[ValueType] = None
    error: Optional[ServiceError] = None

    @classmethod
    def ok(cls, value: ValueType) -> 'ServiceResult[ValueType]':
        return cls(value=value)

    @classmethod
    def fail(cls, kind: ErrorKindEnum, message: str) -> 'ServiceResult[ValueType]':
        return cls(error=ServiceError(kind=kind, message=message))

    @property
    def is_ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> ErrorKindEnum | None:
        return ErrorKindEnum(self.error.kind) if self.error else None

    def unwrap(self) -> ValueType:
        if self.error is not None:
            raise ValueError(f'unwrap called on failed result: {self.error.kind}')
        return self.value  # type: ignore[return-value]


ERROR_KIND_STATUS_CODES: dict[ErrorKindEnum, int] = {
    ErrorKindEnum.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    # 404 rather than 403 so non owners learn nothing about existence
    ErrorKindEnum.NOT_FOUND_OR_FORBIDDEN: status.HTTP_404_NOT_FOUND,
    ErrorKindEnum.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKindEnum.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKindEnum.UPSTREAM_FAILURE: status.HTTP_502_BAD_GATEWAY,
}

if set(ERROR_KIND_STATUS_CODES) != set(ErrorKindEnum):
    raise RuntimeError('Every ErrorKindEnum member needs a status code')


def unwrap_or_raise(result: ServiceResult[ValueType]) -> ValueType:
    """
    Single place the transport turns a failed result into an HTTP error
    """
    if result.error is None:
        return result.value  # type: ignore[return-value]

    kind = ErrorKindEnum(result.error.kind)
    raise APIException(
        code=ERROR_KIND_STATUS_CODES[kind],
        message=result.error.message,
        error_type=kind.value,
    )
