from datetime import datetime
from importlib import import_module
from typing import Any, Optional

from loguru import logger
from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column

from collab import settings
from collab.common.nanoid import NanoId
from collab.common.utils import utcnow
from collab.network.database.repository.mixin import (
    CreateDomainType,
    ReadDomainType,
    RepositoryMixin,
)


class BaseModel(DeclarativeBase, RepositoryMixin[ReadDomainType, CreateDomainType]):
    __pk_abbrev__: str = NotImplemented

    @declared_attr
    def id(cls) -> Mapped[str]:
        # Ensure an abbreviation is implemented
        if cls.__pk_abbrev__ == NotImplemented:
            raise NotImplementedError(f'__pk_abbrev__ must be implemented for {cls.__name__}')

        # Generated application side so every dialect (postgres, sqlite for tests) agrees
        return mapped_column(
            String(length=50),
            primary_key=True,
            default=lambda: NanoId.gen(abbrev=cls.__pk_abbrev__),
        )

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        # App side default keeps microsecond ordering for rows made in one transaction
        return mapped_column(DateTime, server_default=func.now(), default=utcnow)

    @declared_attr
    def modified_at(cls) -> Mapped[Optional[datetime]]:
        return mapped_column(DateTime, onupdate=utcnow, nullable=True)

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}(id={self.id!r})'


def import_model_modules() -> list[Any]:
    """
    Used by things like Alembic and Shell to bring in the relevant models
    Looks for `models.py` in directories registered.
    """
    model_modules = []
    for app in settings.BOUNDARIES:
        import_path = f'{settings.BASE_MODULE}.{app}.models'
        logger.debug(f'importing: {import_path}')
        module = import_module(import_path)
        model_modules.append(module)

    return model_modules
