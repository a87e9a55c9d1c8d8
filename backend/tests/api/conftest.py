from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient

from collab.common.model import BaseModel
from collab.core.identity import MockIdentityClient, UserRoleEnum
from collab.network.database.session import engine


@pytest.fixture(autouse=True)
def clean_tables():
    """
    Requests commit through the session middleware, so API tests clear
    every table afterwards instead of rolling back
    """
    yield
    with engine.begin() as connection:
        for table in reversed(BaseModel.metadata.sorted_tables):
            connection.execute(table.delete())


@pytest.fixture(scope='module')
def client() -> TestClient:
    from collab.network.http.server import server

    with TestClient(server) as c:
        yield c


@pytest.fixture(scope='function')
def auth_headers(identity_client: MockIdentityClient) -> Callable[..., Dict[str, str]]:
    """
    Register a user with the mock provider and hand back bearer headers for them
        headers = auth_headers('owner@example.com')
    """

    def _make(email: str, role: UserRoleEnum = UserRoleEnum.UNKNOWN) -> Dict[str, str]:
        identity = identity_client.register(email, role=role)
        token = identity_client.issue_token(identity)
        return {'Authorization': f'Bearer {token}'}

    return _make
