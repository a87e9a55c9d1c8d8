from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from collab.common.model import BaseModel
from collab.core.membership.constants import MEMBERSHIP_PK_ABBREV
from collab.core.membership.domains import MembershipCreate, MembershipRead


class Membership(BaseModel[MembershipRead, MembershipCreate]):
    __tablename__ = 'project_member'

    project_id: Mapped[str] = mapped_column(ForeignKey('project.id', ondelete='CASCADE'), nullable=False)
    # Users live with the identity provider, there is nothing local to reference
    user_id: Mapped[str] = mapped_column(String(length=50), nullable=False, index=True)
    invited_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    accepted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __pk_abbrev__ = MEMBERSHIP_PK_ABBREV
    __read_domain__ = MembershipRead
    __create_domain__ = MembershipCreate

    __table_args__ = (
        # a user cannot be invited to the same project twice
        UniqueConstraint('project_id', 'user_id', name='uq_project_member_project_user'),
    )
