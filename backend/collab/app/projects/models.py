from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from collab.app.projects.constants import (
    LOCATION_MAX_LENGTH,
    PROJECT_PK_ABBREV,
    TITLE_MAX_LENGTH,
    ProjectStatusEnum,
)
from collab.app.projects.domains import ProjectCreate, ProjectRead
from collab.common.model import BaseModel


class Project(BaseModel[ProjectRead, ProjectCreate]):
    __pk_abbrev__ = PROJECT_PK_ABBREV
    __create_domain__ = ProjectCreate
    __read_domain__ = ProjectRead

    owner_user_id: Mapped[str] = mapped_column(String(length=50), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(length=TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(length=LOCATION_MAX_LENGTH), nullable=True)
    shoot_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    status: Mapped[str] = mapped_column(
        String(length=20),
        nullable=False,
        default=ProjectStatusEnum.DRAFT.value,
        server_default=ProjectStatusEnum.DRAFT.value,
    )
