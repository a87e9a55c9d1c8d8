from typing import Dict, List

from fastapi import APIRouter, Depends

from collab.app.projects.domains import ProjectCreatePayload, ProjectRead, ProjectUpdatePayload
from collab.app.projects.service import ProjectService
from collab.common.nanoid import NanoIdType
from collab.common.result import unwrap_or_raise
from collab.core.identity import AuthenticatedUser, AuthenticatedUserGuard
from collab.core.membership import AcceptResponse, InvitePayload, InviteResponse, MembershipRead

router = APIRouter()


@router.post('/create-project')
def create_project(
    payload: ProjectCreatePayload,
    user: AuthenticatedUser = AuthenticatedUserGuard(),
    project_service: ProjectService = Depends(ProjectService.factory),
) -> ProjectRead:
    """Create a project owned by the caller"""
    return unwrap_or_raise(project_service.create_project(owner_id=user.id, payload=payload))


@router.get('/my')
def list_my_projects(
    user: AuthenticatedUser = AuthenticatedUserGuard(),
    project_service: ProjectService = Depends(ProjectService.factory),
) -> List[ProjectRead]:
    """Projects the caller owns or has joined, newest first"""
    return unwrap_or_raise(project_service.get_user_projects(user.id))


@router.get('/invites/pending')
def list_my_pending_invites(
    user: AuthenticatedUser = AuthenticatedUserGuard(),
    project_service: ProjectService = Depends(ProjectService.factory),
) -> List[MembershipRead]:
    return unwrap_or_raise(project_service.list_pending_invites(user.id))


@router.get('/get-project/{project_id}')
def get_project(
    project_id: NanoIdType,
    user: AuthenticatedUser = AuthenticatedUserGuard(),
    project_service: ProjectService = Depends(ProjectService.factory),
) -> ProjectRead:
    """Readable by the owner and accepted members"""
    return unwrap_or_raise(project_service.get_project(project_id=project_id, user_id=user.id))


@router.patch('/update-project/{project_id}')
def update_project(
    project_id: NanoIdType,
    payload: ProjectUpdatePayload,
    user: AuthenticatedUser = AuthenticatedUserGuard(),
    project_service: ProjectService = Depends(ProjectService.factory),
) -> ProjectRead:
    """Owner only"""
    return unwrap_or_raise(project_service.update_project(project_id=project_id, user_id=user.id, payload=payload))


@router.delete('/delete-project/{project_id}')
def delete_project(
    project_id: NanoIdType,
    user: AuthenticatedUser = AuthenticatedUserGuard(),
    project_service: ProjectService = Depends(ProjectService.factory),
) -> Dict[str, str]:
    """Owner only"""
    unwrap_or_raise(project_service.delete_project(project_id=project_id, user_id=user.id))
    return {'message': 'Project deleted successfully'}


@router.post('/{project_id}/invite')
def invite_member(
    project_id: NanoIdType,
    payload: InvitePayload,
    user: AuthenticatedUser = AuthenticatedUserGuard(),
    project_service: ProjectService = Depends(ProjectService.factory),
) -> InviteResponse:
    """Invite an existing user by email, owner only"""
    return unwrap_or_raise(project_service.invite_member(project_id=project_id, owner_id=user.id, email=payload.email))


@router.post('/{project_id}/accept')
def accept_invite(
    project_id: NanoIdType,
    user: AuthenticatedUser = AuthenticatedUserGuard(),
    project_service: ProjectService = Depends(ProjectService.factory),
) -> AcceptResponse:
    """Accept the caller's pending invite to this project"""
    return unwrap_or_raise(project_service.accept_invite(project_id=project_id, user_id=user.id))


@router.get('/{project_id}/members')
def list_members(
    project_id: NanoIdType,
    user: AuthenticatedUser = AuthenticatedUserGuard(),
    project_service: ProjectService = Depends(ProjectService.factory),
) -> List[MembershipRead]:
    return unwrap_or_raise(project_service.list_members(project_id=project_id, owner_id=user.id))
