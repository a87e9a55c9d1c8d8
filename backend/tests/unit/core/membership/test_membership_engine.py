from unittest.mock import MagicMock

import pytest

from collab.common.result import ErrorKindEnum
from collab.core.identity import IdentityProviderUnavailable, MockIdentityClient
from collab.core.membership import MembershipRepository, MembershipService
from collab.network.database.repository.exceptions import RepositoryUniqueViolation


class TestInviteToProject:
    def test_invite_creates_pending_membership(self, membership_service, membership_repository, project, model_user):
        result = membership_service.invite_to_project(project.id, project.owner_user_id, 'model@example.com')

        assert result.is_ok
        response = result.unwrap()
        assert response.message == 'Invitation sent'
        assert response.membership.project_id == project.id
        assert response.membership.user_id == model_user.id
        assert response.membership.accepted_at is None
        assert response.membership.invited_at is not None
        assert len(membership_repository.rows) == 1

    def test_invite_normalizes_email(self, membership_service, project, model_user):
        result = membership_service.invite_to_project(project.id, project.owner_user_id, '  Model@Example.COM ')

        assert result.unwrap().membership.user_id == model_user.id

    @pytest.mark.parametrize('project_id, email', [('', 'model@example.com'), ('proj-x', '   '), (None, None)])
    def test_invite_rejects_blank_input_without_touching_storage(self, project_id, email):
        repository = MagicMock(spec=MembershipRepository)
        identity_client = MagicMock(spec=MockIdentityClient)
        service = MembershipService(identity_client=identity_client, repository=repository)

        result = service.invite_to_project(project_id, 'user-owner', email)

        assert result.kind == ErrorKindEnum.VALIDATION
        assert repository.mock_calls == []
        assert identity_client.mock_calls == []

    def test_non_owner_cannot_invite(self, membership_service, membership_repository, project, model_user):
        result = membership_service.invite_to_project(project.id, model_user.id, 'owner@example.com')

        assert result.kind == ErrorKindEnum.NOT_FOUND_OR_FORBIDDEN
        assert membership_repository.rows == {}

    def test_missing_project_looks_like_not_owner(self, membership_service, owner, model_user):
        result = membership_service.invite_to_project('proj-missing', owner.id, 'model@example.com')

        assert result.kind == ErrorKindEnum.NOT_FOUND_OR_FORBIDDEN

    def test_unknown_email(self, membership_service, membership_repository, project):
        result = membership_service.invite_to_project(project.id, project.owner_user_id, 'nobody@example.com')

        assert result.kind == ErrorKindEnum.NOT_FOUND
        assert result.error.message == 'no such user'
        assert membership_repository.rows == {}

    def test_owner_cannot_invite_themselves(self, membership_service, membership_repository, project):
        result = membership_service.invite_to_project(project.id, project.owner_user_id, 'owner@example.com')

        assert result.kind == ErrorKindEnum.CONFLICT
        assert membership_repository.rows == {}

    def test_second_invite_conflicts(self, membership_service, membership_repository, project, model_user):
        first = membership_service.invite_to_project(project.id, project.owner_user_id, 'model@example.com')
        second = membership_service.invite_to_project(project.id, project.owner_user_id, 'model@example.com')

        assert first.is_ok
        assert second.kind == ErrorKindEnum.CONFLICT
        assert second.error.message == 'already invited or member'
        assert len(membership_repository.rows) == 1

    def test_invite_after_accept_conflicts(self, membership_service, project, model_user):
        membership_service.invite_to_project(project.id, project.owner_user_id, 'model@example.com')
        membership_service.accept_invite(project.id, model_user.id)

        result = membership_service.invite_to_project(project.id, project.owner_user_id, 'model@example.com')

        assert result.kind == ErrorKindEnum.CONFLICT

    def test_unique_violation_from_store_is_a_conflict(
        self, membership_service, membership_repository, project, model_user, monkeypatch
    ):
        # The existence check misses a row a concurrent invite is inserting
        monkeypatch.setattr(membership_repository, 'get_membership', lambda project_id, user_id: None)

        def _reject(membership):
            raise RepositoryUniqueViolation('project_member violates a unique constraint')

        monkeypatch.setattr(membership_repository, 'create_membership', _reject)

        result = membership_service.invite_to_project(project.id, project.owner_user_id, 'model@example.com')

        assert result.kind == ErrorKindEnum.CONFLICT
        assert result.error.message == 'already invited or member'

    def test_project_deleted_before_insert_is_not_found(
        self, membership_service, membership_repository, project_repository, project, model_user, monkeypatch
    ):
        # Ownership was confirmed, then the project went away before the insert
        monkeypatch.setattr(membership_repository, 'is_project_owner', lambda project_id, owner_id: True)
        del project_repository.rows[project.id]

        result = membership_service.invite_to_project(project.id, project.owner_user_id, 'model@example.com')

        assert result.kind == ErrorKindEnum.NOT_FOUND_OR_FORBIDDEN
        assert result.error.message == 'not owner or project not found'
        assert membership_repository.rows == {}

    def test_identity_provider_outage_is_upstream_failure(
        self, membership_service, identity_client, project, monkeypatch
    ):
        def _unavailable(email):
            raise IdentityProviderUnavailable('Identity provider lookup failed')

        monkeypatch.setattr(identity_client, 'lookup_user_by_email', _unavailable)

        result = membership_service.invite_to_project(project.id, project.owner_user_id, 'model@example.com')

        assert result.kind == ErrorKindEnum.UPSTREAM_FAILURE
        # Internal detail never reaches the caller
        assert 'provider' not in result.error.message


class TestAcceptInvite:
    @pytest.fixture
    def invitation(self, membership_service, project, model_user):
        return membership_service.invite_to_project(project.id, project.owner_user_id, model_user.email).unwrap()

    def test_accept_sets_accepted_at(self, membership_service, membership_repository, invitation, model_user):
        result = membership_service.accept_invite(invitation.membership.project_id, model_user.id)

        response = result.unwrap()
        assert response.message == 'Invitation accepted'
        assert response.membership.id == invitation.membership.id
        assert response.membership.accepted_at is not None
        assert membership_repository.rows[invitation.membership.id].accepted_at == response.membership.accepted_at

    def test_accept_without_invite(self, membership_service, project, identity_client):
        stranger = identity_client.register('stranger@example.com')

        result = membership_service.accept_invite(project.id, stranger.id)

        assert result.kind == ErrorKindEnum.NOT_FOUND
        assert result.error.message == 'no pending invite'

    def test_second_accept_conflicts_and_leaves_row_unchanged(
        self, membership_service, membership_repository, invitation, model_user
    ):
        first = membership_service.accept_invite(invitation.membership.project_id, model_user.id).unwrap()

        second = membership_service.accept_invite(invitation.membership.project_id, model_user.id)

        assert second.kind == ErrorKindEnum.CONFLICT
        assert membership_repository.rows[invitation.membership.id].accepted_at == first.membership.accepted_at

    def test_losing_the_race_is_a_conflict(
        self, membership_service, membership_repository, invitation, model_user, monkeypatch
    ):
        # Interleaving is replayed by serving a stale pending read, not by running two accepts at once
        stale_pending = membership_repository.get_pending_membership(invitation.membership.project_id, model_user.id)
        winner = membership_service.accept_invite(invitation.membership.project_id, model_user.id)

        # The loser read the row while it was still pending
        monkeypatch.setattr(membership_repository, 'get_pending_membership', lambda project_id, user_id: stale_pending)
        loser = membership_service.accept_invite(invitation.membership.project_id, model_user.id)

        assert winner.is_ok
        assert loser.kind == ErrorKindEnum.CONFLICT
        assert loser.error.message == 'invite already accepted or unavailable'
        assert len(membership_repository.rows) == 1

    def test_blank_project_id(self, membership_service, model_user):
        assert membership_service.accept_invite('  ', model_user.id).kind == ErrorKindEnum.VALIDATION


class TestListings:
    def test_pending_invites_newest_first(self, membership_service, project_service, owner, model_user, project_payload_factory):
        first = project_service.create_project(owner.id, project_payload_factory.build()).unwrap()
        second = project_service.create_project(owner.id, project_payload_factory.build()).unwrap()
        membership_service.invite_to_project(first.id, owner.id, model_user.email)
        membership_service.invite_to_project(second.id, owner.id, model_user.email)
        membership_service.accept_invite(first.id, model_user.id)

        pending = membership_service.list_pending_invites(model_user.id).unwrap()

        assert [m.project_id for m in pending] == [second.id]

    def test_owner_lists_members(self, membership_service, project, model_user):
        membership_service.invite_to_project(project.id, project.owner_user_id, model_user.email)

        members = membership_service.list_project_members(project.id, project.owner_user_id).unwrap()

        assert [m.user_id for m in members] == [model_user.id]

    def test_non_owner_cannot_list_members(self, membership_service, project, model_user):
        result = membership_service.list_project_members(project.id, model_user.id)

        assert result.kind == ErrorKindEnum.NOT_FOUND_OR_FORBIDDEN
