from collab.core.membership.constants import MEMBERSHIP_PK_ABBREV
from collab.core.membership.domains import (
    AcceptResponse,
    InvitePayload,
    InviteResponse,
    MembershipCreate,
    MembershipRead,
)
from collab.core.membership.models import Membership
from collab.core.membership.repository import MembershipRepository, SqlMembershipRepository
from collab.core.membership.service import MembershipService

__all__ = [
    'MEMBERSHIP_PK_ABBREV',
    'AcceptResponse',
    'InvitePayload',
    'InviteResponse',
    'Membership',
    'MembershipCreate',
    'MembershipRead',
    'MembershipRepository',
    'MembershipService',
    'SqlMembershipRepository',
]
