from typing import List

import sentry_sdk
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from collab.common.nanoid import NanoIdType
from collab.common.result import ErrorKindEnum, ServiceResult
from collab.common.utils import normalize_email, utcnow
from collab.core.identity import AbstractIdentityClient, IdentityException, get_identity_client
from collab.core.membership.constants import INVITATION_ACCEPTED_MESSAGE, INVITATION_SENT_MESSAGE
from collab.core.membership.domains import (
    AcceptResponse,
    InviteResponse,
    MembershipCreate,
    MembershipRead,
)
from collab.core.membership.repository import MembershipRepository, SqlMembershipRepository
from collab.network.database.repository.exceptions import (
    RepositoryReferenceViolation,
    RepositoryUniqueViolation,
)

NOT_OWNER_MESSAGE = 'not owner or project not found'
NO_SUCH_USER_MESSAGE = 'no such user'
OWNER_IS_MEMBER_MESSAGE = 'owner is already a member'
ALREADY_INVITED_MESSAGE = 'already invited or member'
NO_PENDING_INVITE_MESSAGE = 'no pending invite'
ACCEPT_LOST_MESSAGE = 'invite already accepted or unavailable'
UPSTREAM_FAILURE_MESSAGE = 'upstream failure'

# Failures nobody upstream can act on, reported and surfaced opaquely
UNCLASSIFIED_ERRORS = (IdentityException, SQLAlchemyError)


def _report_unclassified(exc: Exception, operation: str, **extra) -> ServiceResult:
    logger.opt(exception=exc).error(f'membership {operation} failed', **extra)
    sentry_sdk.capture_exception(exc)
    return ServiceResult.fail(ErrorKindEnum.UPSTREAM_FAILURE, UPSTREAM_FAILURE_MESSAGE)


class MembershipService:
    """
    Invite / accept state machine for a (project, user) pair:
        NO_RECORD -> PENDING (invited_at set) -> ACCEPTED (accepted_at set)
    ACCEPTED is terminal. The store arbitrates races: the unique constraint
    rejects a second invite and the conditional update lets one accept win.
    """

    def __init__(
        self,
        identity_client: AbstractIdentityClient,
        repository: MembershipRepository,
    ):
        self.identity_client = identity_client
        self.repository = repository

    @classmethod
    def factory(cls) -> 'MembershipService':
        return cls(
            identity_client=get_identity_client(),
            repository=SqlMembershipRepository.factory(),
        )

    def invite_to_project(
        self,
        project_id: NanoIdType,
        owner_id: NanoIdType,
        email: str,
    ) -> ServiceResult[InviteResponse]:
        project_id = (project_id or '').strip()
        email = normalize_email(email or '')
        if not project_id or not email:
            return ServiceResult.fail(ErrorKindEnum.VALIDATION, 'project id and email are required')

        try:
            return self._invite(project_id=project_id, owner_id=owner_id, email=email)
        except UNCLASSIFIED_ERRORS as exc:
            return _report_unclassified(exc, 'invite', project_id=project_id)

    def _invite(self, project_id: NanoIdType, owner_id: NanoIdType, email: str) -> ServiceResult[InviteResponse]:
        if not self.repository.is_project_owner(project_id, owner_id):
            return ServiceResult.fail(ErrorKindEnum.NOT_FOUND_OR_FORBIDDEN, NOT_OWNER_MESSAGE)

        invitee = self.identity_client.lookup_user_by_email(email)
        if invitee is None:
            return ServiceResult.fail(ErrorKindEnum.NOT_FOUND, NO_SUCH_USER_MESSAGE)

        if invitee.id == owner_id:
            return ServiceResult.fail(ErrorKindEnum.CONFLICT, OWNER_IS_MEMBER_MESSAGE)

        # Fast path only, the unique constraint below is what actually holds
        if self.repository.get_membership(project_id, invitee.id) is not None:
            return ServiceResult.fail(ErrorKindEnum.CONFLICT, ALREADY_INVITED_MESSAGE)

        try:
            membership = self.repository.create_membership(
                MembershipCreate(project_id=project_id, user_id=invitee.id, invited_at=utcnow())
            )
        except RepositoryUniqueViolation:
            logger.info('concurrent invite lost the insert', project_id=project_id, user_id=invitee.id)
            return ServiceResult.fail(ErrorKindEnum.CONFLICT, ALREADY_INVITED_MESSAGE)
        except RepositoryReferenceViolation:
            logger.info('project vanished before the invite insert', project_id=project_id)
            return ServiceResult.fail(ErrorKindEnum.NOT_FOUND_OR_FORBIDDEN, NOT_OWNER_MESSAGE)

        logger.info(
            'invitation created',
            membership_id=membership.id,
            project_id=project_id,
            user_id=invitee.id,
        )
        return ServiceResult.ok(InviteResponse(message=INVITATION_SENT_MESSAGE, membership=membership))

    def accept_invite(self, project_id: NanoIdType, user_id: NanoIdType) -> ServiceResult[AcceptResponse]:
        project_id = (project_id or '').strip()
        if not project_id:
            return ServiceResult.fail(ErrorKindEnum.VALIDATION, 'project id is required')

        try:
            return self._accept(project_id=project_id, user_id=user_id)
        except UNCLASSIFIED_ERRORS as exc:
            return _report_unclassified(exc, 'accept', project_id=project_id)

    def _accept(self, project_id: NanoIdType, user_id: NanoIdType) -> ServiceResult[AcceptResponse]:
        pending = self.repository.get_pending_membership(project_id, user_id)
        if pending is None:
            # ACCEPTED is terminal, a repeat accept is a conflict rather than a missing invite
            if self.repository.get_membership(project_id, user_id) is not None:
                return ServiceResult.fail(ErrorKindEnum.CONFLICT, ACCEPT_LOST_MESSAGE)
            return ServiceResult.fail(ErrorKindEnum.NOT_FOUND, NO_PENDING_INVITE_MESSAGE)

        accepted = self.repository.accept_membership(pending.id, accepted_at=utcnow())
        if accepted is None:
            # Someone else flipped the row between our read and write
            logger.info('accept lost the race', membership_id=pending.id)
            return ServiceResult.fail(ErrorKindEnum.CONFLICT, ACCEPT_LOST_MESSAGE)

        logger.info('invitation accepted', membership_id=accepted.id, project_id=project_id, user_id=user_id)
        return ServiceResult.ok(AcceptResponse(message=INVITATION_ACCEPTED_MESSAGE, membership=accepted))

    def list_pending_invites(self, user_id: NanoIdType) -> ServiceResult[List[MembershipRead]]:
        """Invitations waiting on this user, newest first"""
        try:
            return ServiceResult.ok(self.repository.list_pending_for_user(user_id))
        except UNCLASSIFIED_ERRORS as exc:
            return _report_unclassified(exc, 'list pending', user_id=user_id)

    def list_project_members(
        self,
        project_id: NanoIdType,
        owner_id: NanoIdType,
    ) -> ServiceResult[List[MembershipRead]]:
        """Every membership row of a project, pending and accepted. Owner only."""
        try:
            if not self.repository.is_project_owner(project_id, owner_id):
                return ServiceResult.fail(ErrorKindEnum.NOT_FOUND_OR_FORBIDDEN, NOT_OWNER_MESSAGE)
            return ServiceResult.ok(self.repository.list_for_project(project_id))
        except UNCLASSIFIED_ERRORS as exc:
            return _report_unclassified(exc, 'list members', project_id=project_id)

    def list_accepted_project_ids(self, user_id: NanoIdType) -> List[NanoIdType]:
        return self.repository.list_accepted_project_ids(user_id)
