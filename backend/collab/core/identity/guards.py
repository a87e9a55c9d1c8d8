from typing import Optional

from fastapi import Depends, Request, params, status
from fastapi.security import OAuth2PasswordBearer
from fastapi.security.utils import get_authorization_scheme_param
from loguru import logger

from collab.common import context
from collab.common.exceptions import APIException
from collab.core.identity.client import AbstractIdentityClient, get_identity_client
from collab.core.identity.domains import AuthenticatedUser
from collab.core.identity.exceptions import IdentityTokenExpired, IdentityTokenInvalid


class OAuth2Token(OAuth2PasswordBearer):
    async def __call__(self, request: Request) -> Optional[str]:
        # Check for existence of raw token
        authorization = request.headers.get('Authorization')
        scheme, token = get_authorization_scheme_param(authorization)
        if not authorization or scheme.lower() != 'bearer' or not token:
            if self.auto_error:
                raise APIException(
                    code=status.HTTP_401_UNAUTHORIZED,
                    message='Not authenticated',
                )
            else:
                return None
        return token


oauth = OAuth2Token(
    scheme_name='identity-provider-bearer',
    tokenUrl='auth/v1/token',
    description='Access token issued by the identity provider',
)


def authenticate_user(
    token: str = Depends(oauth),
    identity_client: AbstractIdentityClient = Depends(get_identity_client),
) -> AuthenticatedUser:
    try:
        identity = identity_client.verify_token(token)
    except IdentityTokenExpired:
        raise APIException(
            code=status.HTTP_401_UNAUTHORIZED,
            message='Expired access token',
        )
    except IdentityTokenInvalid:
        logger.debug('rejected bearer token')
        raise APIException(
            code=status.HTTP_401_UNAUTHORIZED,
            message='Invalid access token',
        )

    # Update global context with authenticated user
    context.set_user(
        user_type=context.AppContextUserType.USER,
        user_id=identity.id,
    )

    return AuthenticatedUser(
        id=identity.id,
        email=identity.email,
        role=identity.role,
    )


class AuthenticatedUserGuard(params.Security):
    """
    Use in router:
        user: AuthenticatedUser = AuthenticatedUserGuard()
    """

    def __init__(
        self,
        *,
        use_cache: bool = True,
    ):
        super().__init__(
            dependency=authenticate_user,
            use_cache=use_cache,
        )
