from collab.core.identity.client import (
    AbstractIdentityClient,
    MockIdentityClient,
    SupabaseIdentityClient,
    get_identity_client,
)
from collab.core.identity.constants import UserRoleEnum
from collab.core.identity.domains import AuthenticatedUser, Identity, Me
from collab.core.identity.exceptions import (
    IdentityException,
    IdentityProviderUnavailable,
    IdentityTokenExpired,
    IdentityTokenInvalid,
)
from collab.core.identity.guards import AuthenticatedUserGuard, authenticate_user, oauth

__all__ = [
    # Clients
    'AbstractIdentityClient',
    'MockIdentityClient',
    'SupabaseIdentityClient',
    'get_identity_client',
    # Constants
    'UserRoleEnum',
    # Domains
    'AuthenticatedUser',
    'Identity',
    'Me',
    # Exceptions
    'IdentityException',
    'IdentityProviderUnavailable',
    'IdentityTokenExpired',
    'IdentityTokenInvalid',
    # Guards
    'AuthenticatedUserGuard',
    'authenticate_user',
    'oauth',
]
