from typing import Callable, List, TypeVar

import sentry_sdk
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from collab.app.projects.domains import ProjectCreate, ProjectCreatePayload, ProjectRead, ProjectUpdatePayload
from collab.app.projects.repository import ProjectRepository, SqlProjectRepository
from collab.common.nanoid import NanoIdType
from collab.common.result import ErrorKindEnum, ServiceResult
from collab.core.membership import AcceptResponse, InviteResponse, MembershipRead, MembershipService

NOT_OWNER_MESSAGE = 'not owner or project not found'
NOT_VISIBLE_MESSAGE = 'project not found'

ValueType = TypeVar('ValueType')


def dedupe_projects(*project_lists: List[ProjectRead]) -> List[ProjectRead]:
    """
    Merge project lists keeping the first occurrence of each id, then order
    newest first with id as the tie breaker so the output is deterministic
    """
    seen: dict[NanoIdType, ProjectRead] = {}
    for projects in project_lists:
        for project in projects:
            seen.setdefault(project.id, project)

    return sorted(seen.values(), key=lambda project: (project.created_at, project.id), reverse=True)


class ProjectService:
    def __init__(
        self,
        repository: ProjectRepository,
        membership_service: MembershipService,
    ):
        self.repository = repository
        self.membership_service = membership_service

    @classmethod
    def factory(cls) -> 'ProjectService':
        return cls(
            repository=SqlProjectRepository.factory(),
            membership_service=MembershipService.factory(),
        )

    def _guard(self, operation: str, func: Callable[[], ServiceResult[ValueType]]) -> ServiceResult[ValueType]:
        try:
            return func()
        except SQLAlchemyError as exc:
            logger.opt(exception=exc).error(f'project {operation} failed')
            sentry_sdk.capture_exception(exc)
            return ServiceResult.fail(ErrorKindEnum.UPSTREAM_FAILURE, 'upstream failure')

    def create_project(self, owner_id: NanoIdType, payload: ProjectCreatePayload) -> ServiceResult[ProjectRead]:
        """Owner is always the caller, status falls back to draft"""

        def _create() -> ServiceResult[ProjectRead]:
            project = self.repository.create(ProjectCreate(owner_user_id=owner_id, **payload.to_dict()))
            logger.info('project created', project_id=project.id, owner_user_id=owner_id)
            return ServiceResult.ok(project)

        return self._guard('create', _create)

    def get_user_projects(self, user_id: NanoIdType) -> ServiceResult[List[ProjectRead]]:
        """Owned projects plus projects the user accepted an invite to, each id once"""

        def _list() -> ServiceResult[List[ProjectRead]]:
            owned = self.repository.list_owned(user_id)
            joined_ids = self.membership_service.list_accepted_project_ids(user_id)
            joined = self.repository.list_for_ids(joined_ids)
            return ServiceResult.ok(dedupe_projects(owned, joined))

        return self._guard('list', _list)

    def get_project(self, project_id: NanoIdType, user_id: NanoIdType) -> ServiceResult[ProjectRead]:
        def _get() -> ServiceResult[ProjectRead]:
            project = self.repository.get_or_none(project_id)
            if project is None:
                return ServiceResult.fail(ErrorKindEnum.NOT_FOUND_OR_FORBIDDEN, NOT_VISIBLE_MESSAGE)
            if project.owner_user_id == user_id:
                return ServiceResult.ok(project)
            if project_id in self.membership_service.list_accepted_project_ids(user_id):
                return ServiceResult.ok(project)
            return ServiceResult.fail(ErrorKindEnum.NOT_FOUND_OR_FORBIDDEN, NOT_VISIBLE_MESSAGE)

        return self._guard('get', _get)

    def update_project(
        self,
        project_id: NanoIdType,
        user_id: NanoIdType,
        payload: ProjectUpdatePayload,
    ) -> ServiceResult[ProjectRead]:
        def _update() -> ServiceResult[ProjectRead]:
            updates = payload.get_provided_fields()
            project = self.repository.update_owned(project_id, user_id, **updates)
            if project is None:
                return ServiceResult.fail(ErrorKindEnum.NOT_FOUND_OR_FORBIDDEN, NOT_OWNER_MESSAGE)

            logger.info('project updated', project_id=project_id, fields=sorted(updates))
            return ServiceResult.ok(project)

        return self._guard('update', _update)

    def delete_project(self, project_id: NanoIdType, user_id: NanoIdType) -> ServiceResult[ProjectRead]:
        """Memberships go with the project through the foreign key cascade"""

        def _delete() -> ServiceResult[ProjectRead]:
            project = self.repository.get_owned_or_none(project_id, user_id)
            if project is None:
                return ServiceResult.fail(ErrorKindEnum.NOT_FOUND_OR_FORBIDDEN, NOT_OWNER_MESSAGE)

            if self.repository.delete_owned(project_id, user_id) == 0:
                # Deleted underneath us, report it the same way as never existing
                return ServiceResult.fail(ErrorKindEnum.NOT_FOUND_OR_FORBIDDEN, NOT_OWNER_MESSAGE)

            logger.info('project deleted', project_id=project_id)
            return ServiceResult.ok(project)

        return self._guard('delete', _delete)

    def invite_member(self, project_id: NanoIdType, owner_id: NanoIdType, email: str) -> ServiceResult[InviteResponse]:
        return self.membership_service.invite_to_project(project_id=project_id, owner_id=owner_id, email=email)

    def accept_invite(self, project_id: NanoIdType, user_id: NanoIdType) -> ServiceResult[AcceptResponse]:
        return self.membership_service.accept_invite(project_id=project_id, user_id=user_id)

    def list_members(self, project_id: NanoIdType, owner_id: NanoIdType) -> ServiceResult[List[MembershipRead]]:
        return self.membership_service.list_project_members(project_id=project_id, owner_id=owner_id)

    def list_pending_invites(self, user_id: NanoIdType) -> ServiceResult[List[MembershipRead]]:
        return self.membership_service.list_pending_invites(user_id)
