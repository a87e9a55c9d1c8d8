from unittest.mock import patch

import pytest

from collab.app.projects import (
    ProjectCreate,
    ProjectRead,
    ProjectRepository,
    ProjectService,
)
from collab.common.utils import utcnow
from collab.core.identity import Identity, MockIdentityClient, UserRoleEnum
from collab.core.membership import (
    MembershipCreate,
    MembershipRead,
    MembershipRepository,
    MembershipService,
)
from collab.network.database.repository.exceptions import (
    RepositoryReferenceViolation,
    RepositoryUniqueViolation,
)


@pytest.fixture(autouse=True)
def no_db_access(schema):
    """
    Unit tests should not be able to connect to the database
    """

    with patch(
        'collab.network.database.session.engine.connect',
        side_effect=Exception('🛑 Database access attempted! 🛑\n Not permitted during unit tests!'),
    ):
        yield


class InMemoryProjectRepository(ProjectRepository):
    def __init__(self):
        self.rows: dict[str, ProjectRead] = {}

    def create(self, project: ProjectCreate) -> ProjectRead:
        read = ProjectRead(**project.to_dict(), created_at=utcnow())
        self.rows[read.id] = read
        return read

    def get_or_none(self, project_id):
        return self.rows.get(project_id)

    def get_owned_or_none(self, project_id, owner_id):
        project = self.rows.get(project_id)
        if project is None or project.owner_user_id != owner_id:
            return None
        return project

    def list_owned(self, owner_id):
        return _newest_first(p for p in self.rows.values() if p.owner_user_id == owner_id)

    def list_for_ids(self, project_ids):
        return _newest_first(p for p in self.rows.values() if p.id in project_ids)

    def update_owned(self, project_id, owner_id, **updates):
        if self.get_owned_or_none(project_id, owner_id) is None:
            return None
        project = self.rows[project_id].model_copy(update={**updates, 'modified_at': utcnow()})
        self.rows[project_id] = project
        return project

    def delete_owned(self, project_id, owner_id):
        if self.get_owned_or_none(project_id, owner_id) is None:
            return 0
        del self.rows[project_id]
        return 1


class InMemoryMembershipRepository(MembershipRepository):
    def __init__(self, projects: InMemoryProjectRepository):
        self.projects = projects
        self.rows: dict[str, MembershipRead] = {}

    def is_project_owner(self, project_id, owner_id):
        return self.projects.get_owned_or_none(project_id, owner_id) is not None

    def get_membership(self, project_id, user_id):
        return next(
            (m for m in self.rows.values() if m.project_id == project_id and m.user_id == user_id),
            None,
        )

    def get_pending_membership(self, project_id, user_id):
        membership = self.get_membership(project_id, user_id)
        if membership is None or not membership.is_pending:
            return None
        return membership

    def create_membership(self, membership: MembershipCreate) -> MembershipRead:
        if self.get_membership(membership.project_id, membership.user_id) is not None:
            raise RepositoryUniqueViolation('project_member violates a unique constraint')
        if self.projects.get_or_none(membership.project_id) is None:
            raise RepositoryReferenceViolation('project_member references a missing row')
        read = MembershipRead(**membership.to_dict(), created_at=utcnow())
        self.rows[read.id] = read
        return read

    def accept_membership(self, membership_id, accepted_at):
        membership = self.rows.get(membership_id)
        if membership is None or not membership.is_pending:
            return None
        membership = membership.model_copy(update={'accepted_at': accepted_at})
        self.rows[membership_id] = membership
        return membership

    def list_pending_for_user(self, user_id):
        pending = [m for m in self.rows.values() if m.user_id == user_id and m.is_pending]
        return sorted(pending, key=lambda m: (m.invited_at, m.id), reverse=True)

    def list_for_project(self, project_id):
        members = [m for m in self.rows.values() if m.project_id == project_id]
        return sorted(members, key=lambda m: (m.invited_at, m.id))

    def list_accepted_project_ids(self, user_id):
        return [m.project_id for m in self.rows.values() if m.user_id == user_id and not m.is_pending]


def _newest_first(projects):
    return sorted(projects, key=lambda p: (p.created_at, p.id), reverse=True)


@pytest.fixture
def identity_client() -> MockIdentityClient:
    return MockIdentityClient()


@pytest.fixture
def project_repository() -> InMemoryProjectRepository:
    return InMemoryProjectRepository()


@pytest.fixture
def membership_repository(project_repository) -> InMemoryMembershipRepository:
    return InMemoryMembershipRepository(projects=project_repository)


@pytest.fixture
def membership_service(identity_client, membership_repository) -> MembershipService:
    return MembershipService(identity_client=identity_client, repository=membership_repository)


@pytest.fixture
def project_service(project_repository, membership_service) -> ProjectService:
    return ProjectService(repository=project_repository, membership_service=membership_service)


@pytest.fixture
def owner(identity_client) -> Identity:
    return identity_client.register('owner@example.com', role=UserRoleEnum.PHOTOGRAPHER)


@pytest.fixture
def model_user(identity_client) -> Identity:
    return identity_client.register('model@example.com', role=UserRoleEnum.MODEL)


@pytest.fixture
def project(project_service, owner, project_payload_factory) -> ProjectRead:
    payload = project_payload_factory.build(title='Spring Shoot')
    return project_service.create_project(owner_id=owner.id, payload=payload).unwrap()
