from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from collab.app.projects.constants import (
    DESCRIPTION_MAX_LENGTH,
    LOCATION_MAX_LENGTH,
    PROJECT_PK_ABBREV,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
    ProjectStatusEnum,
)
from collab.common.domain import BaseDomain
from collab.common.nanoid import NanoId, NanoIdType
from collab.common.utils import as_naive_utc, utcnow


def _clean_title(value: str) -> str:
    value = value.strip()
    if not TITLE_MIN_LENGTH <= len(value) <= TITLE_MAX_LENGTH:
        raise ValueError(f'Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters')
    return value


def _clean_optional_text(value: Optional[str], max_length: int, label: str) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if len(value) > max_length:
        raise ValueError(f'{label} must be at most {max_length} characters')
    return value


def _clean_shoot_date(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    value = as_naive_utc(value)
    if value <= utcnow():
        raise ValueError('Shoot date must be in the future')
    return value


def _clean_status(value: Any) -> Any:
    if not ProjectStatusEnum.has(value):
        raise ValueError(ProjectStatusEnum.allowed_message('status'))
    return value


class ProjectCreatePayload(BaseDomain):
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    shoot_date: Optional[datetime] = None
    status: ProjectStatusEnum = ProjectStatusEnum.DRAFT

    @field_validator('title')
    def validate_title(cls, value):
        return _clean_title(value)

    @field_validator('description')
    def validate_description(cls, value):
        return _clean_optional_text(value, DESCRIPTION_MAX_LENGTH, 'Description')

    @field_validator('location')
    def validate_location(cls, value):
        return _clean_optional_text(value, LOCATION_MAX_LENGTH, 'Location')

    @field_validator('shoot_date')
    def validate_shoot_date(cls, value):
        return _clean_shoot_date(value)

    @field_validator('status', mode='before')
    def validate_status(cls, value):
        return _clean_status(value)


class ProjectUpdatePayload(BaseDomain):
    """
    Partial update, only fields present in the body are written.
    Explicit nulls clear the optional fields.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    shoot_date: Optional[datetime] = None
    status: Optional[ProjectStatusEnum] = None

    @field_validator('title')
    def validate_title(cls, value):
        if value is None:
            raise ValueError('Title cannot be null')
        return _clean_title(value)

    @field_validator('description')
    def validate_description(cls, value):
        return _clean_optional_text(value, DESCRIPTION_MAX_LENGTH, 'Description')

    @field_validator('location')
    def validate_location(cls, value):
        return _clean_optional_text(value, LOCATION_MAX_LENGTH, 'Location')

    @field_validator('shoot_date')
    def validate_shoot_date(cls, value):
        return _clean_shoot_date(value)

    @field_validator('status', mode='before')
    def validate_status(cls, value):
        if value is None:
            raise ValueError('Status cannot be null')
        return _clean_status(value)

    @model_validator(mode='after')
    def validate_not_empty(self):
        if not self.model_fields_set:
            raise ValueError('At least one field must be provided')
        return self


class ProjectCreate(BaseDomain):
    id: Optional[NanoIdType] = Field(default_factory=lambda: NanoId.gen(abbrev=PROJECT_PK_ABBREV))
    owner_user_id: NanoIdType
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    shoot_date: Optional[datetime] = None
    status: ProjectStatusEnum = ProjectStatusEnum.DRAFT


class ProjectRead(BaseDomain):
    id: NanoIdType
    owner_user_id: NanoIdType
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    shoot_date: Optional[datetime] = None
    status: ProjectStatusEnum
    created_at: datetime
    modified_at: Optional[datetime] = None
