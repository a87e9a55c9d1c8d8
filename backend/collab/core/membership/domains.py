from datetime import datetime
from typing import Optional

from pydantic import Field

from collab.common.domain import BaseDomain
from collab.common.nanoid import NanoId, NanoIdType
from collab.core.membership.constants import MEMBERSHIP_PK_ABBREV


class MembershipCreate(BaseDomain):
    id: Optional[NanoIdType] = Field(default_factory=lambda: NanoId.gen(abbrev=MEMBERSHIP_PK_ABBREV))
    project_id: NanoIdType
    user_id: NanoIdType
    invited_at: datetime
    accepted_at: Optional[datetime] = None


class MembershipRead(MembershipCreate):
    id: NanoIdType
    created_at: datetime
    modified_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.accepted_at is None


class InvitePayload(BaseDomain):
    email: str


class InviteResponse(BaseDomain):
    message: str
    membership: MembershipRead


class AcceptResponse(BaseDomain):
    message: str
    membership: MembershipRead
