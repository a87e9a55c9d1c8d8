from typing import Any

from pydantic import Field

from collab.common.domain import BaseDomain
from collab.common.nanoid import NanoIdType
from collab.common.utils import normalize_email
from collab.core.identity.constants import UserRoleEnum


class Identity(BaseDomain):
    """
    A user as the identity provider knows them. Never stored locally.
    """

    id: NanoIdType
    email: str
    role: UserRoleEnum = UserRoleEnum.UNKNOWN

    @classmethod
    def from_provider_user(cls, payload: dict[str, Any]) -> 'Identity':
        """
        Accepts either a decoded access token (sub) or an admin api user record (id)
        """
        metadata = payload.get('user_metadata') or {}
        role = metadata.get('role')
        return cls(
            id=payload.get('sub') or payload['id'],
            email=normalize_email(payload.get('email') or ''),
            role=role if UserRoleEnum.has(role) else UserRoleEnum.UNKNOWN,
        )


class AuthenticatedUser(BaseDomain):
    id: NanoIdType
    email: str
    role: UserRoleEnum = UserRoleEnum.UNKNOWN


class Me(BaseDomain):
    message: str = Field(default='You are authenticated!')
    user: AuthenticatedUser
