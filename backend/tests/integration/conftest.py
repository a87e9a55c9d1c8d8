import pytest
from sqlalchemy.orm import Session

from collab.app.projects import Project, ProjectCreate, ProjectRead, ProjectService, SqlProjectRepository
from collab.common import context
from collab.core.identity import Identity, UserRoleEnum
from collab.core.membership import MembershipService, SqlMembershipRepository
from collab.network.database.session import db as session_manager


@pytest.fixture(scope='function', autouse=True)
def db() -> Session:
    # This needs to be set first for fixtures to be able to create
    context.initialize(
        user_type=context.AppContextUserType.SYSTEM,
        user_id='user-system',
        breadcrumb='testing',
    )

    with session_manager(commit_on_success=False):
        session = session_manager.session

        # Patch commit() to prevent accidental commits in tests
        # This allows production code to use db.session.commit() naturally
        # without breaking test rollbacks
        def no_op_commit():
            # In tests, flush changes but don't actually commit
            # This makes the changes visible within the transaction
            # but keeps them rollbackable
            session.flush()

        session.commit = no_op_commit

        yield session_manager.session

    session.rollback()


@pytest.fixture(scope='function')
def owner(identity_client) -> Identity:
    return identity_client.register('owner@example.com', role=UserRoleEnum.PHOTOGRAPHER)


@pytest.fixture(scope='function')
def model_user(identity_client) -> Identity:
    return identity_client.register('model@example.com', role=UserRoleEnum.MODEL)


@pytest.fixture(scope='function')
def project(owner, project_payload_factory) -> ProjectRead:
    payload = project_payload_factory.build(title='Spring Shoot')
    return Project.create(ProjectCreate(owner_user_id=owner.id, **payload.to_dict()))


@pytest.fixture(scope='function')
def membership_service(identity_client) -> MembershipService:
    return MembershipService(identity_client=identity_client, repository=SqlMembershipRepository.factory())


@pytest.fixture(scope='function')
def project_service(membership_service) -> ProjectService:
    return ProjectService(repository=SqlProjectRepository.factory(), membership_service=membership_service)
