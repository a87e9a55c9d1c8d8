import abc
from datetime import datetime
from typing import List

from collab.common.nanoid import NanoIdType
from collab.core.membership.domains import MembershipCreate, MembershipRead
from collab.core.membership.models import Membership


class MembershipRepository(abc.ABC):
    """
    Storage the membership engine runs against. The SQL implementation is
    used everywhere except unit tests which swap in an in memory one.
    """

    @abc.abstractmethod
    def is_project_owner(self, project_id: NanoIdType, owner_id: NanoIdType) -> bool: ...

    @abc.abstractmethod
    def get_membership(self, project_id: NanoIdType, user_id: NanoIdType) -> MembershipRead | None: ...

    @abc.abstractmethod
    def get_pending_membership(self, project_id: NanoIdType, user_id: NanoIdType) -> MembershipRead | None: ...

    @abc.abstractmethod
    def create_membership(self, membership: MembershipCreate) -> MembershipRead:
        """
        :raises RepositoryUniqueViolation: (project_id, user_id) already has a row
        :raises RepositoryReferenceViolation: the project no longer exists
        """

    @abc.abstractmethod
    def accept_membership(self, membership_id: NanoIdType, accepted_at: datetime) -> MembershipRead | None:
        """
        Flip a pending row to accepted. None when the row was no longer pending.
        """

    @abc.abstractmethod
    def list_pending_for_user(self, user_id: NanoIdType) -> List[MembershipRead]: ...

    @abc.abstractmethod
    def list_for_project(self, project_id: NanoIdType) -> List[MembershipRead]: ...

    @abc.abstractmethod
    def list_accepted_project_ids(self, user_id: NanoIdType) -> List[NanoIdType]: ...


class SqlMembershipRepository(MembershipRepository):
    @classmethod
    def factory(cls) -> 'SqlMembershipRepository':
        return cls()

    def is_project_owner(self, project_id: NanoIdType, owner_id: NanoIdType) -> bool:
        from collab.app.projects.models import Project

        return Project.count(Project.id == project_id, Project.owner_user_id == owner_id) == 1

    def get_membership(self, project_id: NanoIdType, user_id: NanoIdType) -> MembershipRead | None:
        return Membership.get_or_none(
            Membership.project_id == project_id,
            Membership.user_id == user_id,
        )

    def get_pending_membership(self, project_id: NanoIdType, user_id: NanoIdType) -> MembershipRead | None:
        return Membership.get_or_none(
            Membership.project_id == project_id,
            Membership.user_id == user_id,
            Membership.accepted_at.is_(None),
        )

    def create_membership(self, membership: MembershipCreate) -> MembershipRead:
        return Membership.create_unique(membership)

    def accept_membership(self, membership_id: NanoIdType, accepted_at: datetime) -> MembershipRead | None:
        return Membership.conditional_update(
            membership_id,
            Membership.accepted_at.is_(None),
            accepted_at=accepted_at,
        )

    def list_pending_for_user(self, user_id: NanoIdType) -> List[MembershipRead]:
        return Membership.list(
            Membership.user_id == user_id,
            Membership.accepted_at.is_(None),
            ordering=['-invited_at', '-id'],
        )

    def list_for_project(self, project_id: NanoIdType) -> List[MembershipRead]:
        return Membership.list(
            Membership.project_id == project_id,
            ordering=['invited_at', 'id'],
        )

    def list_accepted_project_ids(self, user_id: NanoIdType) -> List[NanoIdType]:
        return Membership.list_attribute(
            'project_id',
            Membership.user_id == user_id,
            Membership.accepted_at.is_not(None),
        )
