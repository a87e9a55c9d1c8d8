import abc
from functools import lru_cache
from typing import Any

import jwt
import requests
from loguru import logger

from collab import settings
from collab.common.nanoid import NanoId
from collab.common.utils import normalize_email
from collab.core.identity.constants import ADMIN_USERS_PATH, JWT_ALGORITHMS, UserRoleEnum
from collab.core.identity.domains import Identity
from collab.core.identity.exceptions import (
    IdentityProviderUnavailable,
    IdentityTokenExpired,
    IdentityTokenInvalid,
)


class AbstractIdentityClient(abc.ABC):
    """
    Boundary to the external identity provider. Signup, login and token
    issuance all live there, we only verify and look up.
    """

    @abc.abstractmethod
    def verify_token(self, token: str) -> Identity:
        """
        :raises IdentityTokenExpired: token was valid but is past its expiry
        :raises IdentityTokenInvalid: anything else wrong with the token
        """

    @abc.abstractmethod
    def lookup_user_by_email(self, email: str) -> Identity | None:
        """
        :raises IdentityProviderUnavailable: provider could not answer
        """


class SupabaseIdentityClient(AbstractIdentityClient):
    """
    Verifies provider issued JWTs locally with the shared secret and uses the
    service role key against the GoTrue admin api for email lookups
    """

    def __init__(
        self,
        base_url: str = settings.IDENTITY_PROVIDER_URL,
        service_role_key: str | None = settings.IDENTITY_SERVICE_ROLE_KEY,
        jwt_secret: str = settings.IDENTITY_JWT_SECRET,
        jwt_audience: str = settings.IDENTITY_JWT_AUDIENCE,
        timeout: int = settings.IDENTITY_REQUEST_TIMEOUT,
        page_size: int = settings.IDENTITY_ADMIN_PAGE_SIZE,
    ):
        self.base_url = base_url.rstrip('/')
        self.service_role_key = service_role_key
        self.jwt_secret = jwt_secret
        self.jwt_audience = jwt_audience
        self.timeout = timeout
        self.page_size = page_size

    def verify_token(self, token: str) -> Identity:
        try:
            claims = jwt.decode(
                token,
                self.jwt_secret,
                algorithms=JWT_ALGORITHMS,
                audience=self.jwt_audience,
                options={'require': ['exp', 'sub']},
            )
        except jwt.ExpiredSignatureError as exc:
            raise IdentityTokenExpired('Expired access token') from exc
        except jwt.InvalidTokenError as exc:
            raise IdentityTokenInvalid('Invalid access token') from exc

        return Identity.from_provider_user(claims)

    def lookup_user_by_email(self, email: str) -> Identity | None:
        if not self.service_role_key:
            raise IdentityProviderUnavailable('IDENTITY_SERVICE_ROLE_KEY is not configured')

        target = normalize_email(email)
        page = 1
        while True:
            users = self._list_users(page=page)
            for user in users:
                if normalize_email(user.get('email') or '') == target:
                    return Identity.from_provider_user(user)

            if len(users) < self.page_size:
                return None
            page += 1

    def _list_users(self, page: int) -> list[dict[str, Any]]:
        try:
            response = requests.get(
                f'{self.base_url}{ADMIN_USERS_PATH}',
                params={'page': page, 'per_page': self.page_size},
                headers={
                    'apikey': self.service_role_key,
                    'Authorization': f'Bearer {self.service_role_key}',
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning(f'identity provider admin lookup failed: {exc}')
            raise IdentityProviderUnavailable('Identity provider lookup failed', context={'page': page}) from exc

        return payload.get('users', [])


class MockIdentityClient(AbstractIdentityClient):
    """
    In memory provider for tests and local development
    """

    TOKEN_PREFIX = 'mock-token'

    def __init__(self):
        self.users: dict[str, Identity] = {}
        self.tokens: dict[str, str] = {}

    def register(self, email: str, role: UserRoleEnum = UserRoleEnum.UNKNOWN) -> Identity:
        identity = Identity(id=NanoId.gen(abbrev='user'), email=normalize_email(email), role=role)
        self.users[identity.id] = identity
        return identity

    def issue_token(self, identity: Identity) -> str:
        token = f'{self.TOKEN_PREFIX}-{identity.id}'
        self.tokens[token] = identity.id
        return token

    def expire_token(self, token: str) -> None:
        self.tokens[token] = ''

    def verify_token(self, token: str) -> Identity:
        if token not in self.tokens:
            raise IdentityTokenInvalid('Invalid access token')
        user_id = self.tokens[token]
        if not user_id:
            raise IdentityTokenExpired('Expired access token')
        return self.users[user_id]

    def lookup_user_by_email(self, email: str) -> Identity | None:
        target = normalize_email(email)
        return next((user for user in self.users.values() if user.email == target), None)

    def reset(self) -> None:
        self.users.clear()
        self.tokens.clear()


@lru_cache(maxsize=1)
def get_identity_client() -> AbstractIdentityClient:
    """Get the appropriate identity client based on settings, one per process."""
    if settings.USE_MOCK_IDENTITY_CLIENT:
        return MockIdentityClient()
    return SupabaseIdentityClient()
