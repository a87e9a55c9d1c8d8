from collab.app.projects.constants import PROJECT_PK_ABBREV, ProjectStatusEnum
from collab.app.projects.domains import (
    ProjectCreate,
    ProjectCreatePayload,
    ProjectRead,
    ProjectUpdatePayload,
)
from collab.app.projects.models import Project
from collab.app.projects.repository import ProjectRepository, SqlProjectRepository
from collab.app.projects.service import ProjectService, dedupe_projects

__all__ = [
    'PROJECT_PK_ABBREV',
    'Project',
    'ProjectCreate',
    'ProjectCreatePayload',
    'ProjectRead',
    'ProjectRepository',
    'ProjectService',
    'ProjectStatusEnum',
    'ProjectUpdatePayload',
    'SqlProjectRepository',
    'dedupe_projects',
]
