from fastapi import APIRouter

from collab.core.identity.domains import AuthenticatedUser, Me
from collab.core.identity.guards import AuthenticatedUserGuard

router = APIRouter()


@router.get('/me')
def me(user: AuthenticatedUser = AuthenticatedUserGuard()) -> Me:
    """Echo back who the bearer token belongs to"""
    return Me(user=user)
