import abc
from typing import Any, List

from collab.app.projects.domains import ProjectCreate, ProjectRead
from collab.app.projects.models import Project
from collab.common.nanoid import NanoIdType

# Newest first, id breaks ties between rows created in the same instant
NEWEST_FIRST = ['-created_at', '-id']


class ProjectRepository(abc.ABC):
    @abc.abstractmethod
    def create(self, project: ProjectCreate) -> ProjectRead: ...

    @abc.abstractmethod
    def get_or_none(self, project_id: NanoIdType) -> ProjectRead | None: ...

    @abc.abstractmethod
    def get_owned_or_none(self, project_id: NanoIdType, owner_id: NanoIdType) -> ProjectRead | None: ...

    @abc.abstractmethod
    def list_owned(self, owner_id: NanoIdType) -> List[ProjectRead]: ...

    @abc.abstractmethod
    def list_for_ids(self, project_ids: List[NanoIdType]) -> List[ProjectRead]: ...

    @abc.abstractmethod
    def update_owned(self, project_id: NanoIdType, owner_id: NanoIdType, **updates: Any) -> ProjectRead | None:
        """
        Single owner filtered write. None when the project is gone or not owned.
        """

    @abc.abstractmethod
    def delete_owned(self, project_id: NanoIdType, owner_id: NanoIdType) -> int: ...


class SqlProjectRepository(ProjectRepository):
    @classmethod
    def factory(cls) -> 'SqlProjectRepository':
        return cls()

    def create(self, project: ProjectCreate) -> ProjectRead:
        return Project.create(project)

    def get_or_none(self, project_id: NanoIdType) -> ProjectRead | None:
        return Project.get_or_none(Project.id == project_id)

    def get_owned_or_none(self, project_id: NanoIdType, owner_id: NanoIdType) -> ProjectRead | None:
        return Project.get_or_none(Project.id == project_id, Project.owner_user_id == owner_id)

    def list_owned(self, owner_id: NanoIdType) -> List[ProjectRead]:
        return Project.list(Project.owner_user_id == owner_id, ordering=NEWEST_FIRST)

    def list_for_ids(self, project_ids: List[NanoIdType]) -> List[ProjectRead]:
        if not project_ids:
            return []
        return Project.list(Project.id.in_(project_ids), ordering=NEWEST_FIRST)

    def update_owned(self, project_id: NanoIdType, owner_id: NanoIdType, **updates: Any) -> ProjectRead | None:
        return Project.conditional_update(project_id, Project.owner_user_id == owner_id, **updates)

    def delete_owned(self, project_id: NanoIdType, owner_id: NanoIdType) -> int:
        return Project.delete(Project.id == project_id, Project.owner_user_id == owner_id)
