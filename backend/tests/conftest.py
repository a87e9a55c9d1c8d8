import os
import sys

# Test Environment Overrides will override .env files
# THESE MUST BE IMPORTED BEFORE ANYTHING
os.environ.setdefault('ENVIRONMENT', 'testing')
os.environ.setdefault('COMPANY_NAME', 'TestCompany')
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('ATOMIC_REQUESTS', 'True')
os.environ.setdefault('IDENTITY_JWT_SECRET', 'test-jwt-secret')
os.environ.setdefault('USE_MOCK_SENTRY_CLIENT', 'True')
os.environ.setdefault('USE_MOCK_IDENTITY_CLIENT', 'True')

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from collab import setup

setup.run()

import pytest

# Add fixtures here
pytest_plugins = [
    'tests.factories.app.projects',
]

# ruff: noqa: E402
from collab import settings
from collab.common.model import BaseModel
from collab.core.identity import MockIdentityClient, get_identity_client
from collab.network.database.session import engine

# When collab files are imported before the above patching, tests will use
# incorrect database settings as well as non mocked services.
if not settings.IS_TESTING or not settings.DATABASE_URL.startswith('sqlite'):
    raise ValueError(
        'Patching of environment variables failed.\n'
        'This will cause unexpected test failures'
        'Check all collab imports are delayed until after patching.\n'
    )


@pytest.fixture(scope='session', autouse=True)
def schema():
    """
    In memory sqlite lives as long as the shared connection, build the schema once
    """
    BaseModel.metadata.create_all(engine)
    yield
    BaseModel.metadata.drop_all(engine)


@pytest.fixture(scope='function')
def identity_client() -> MockIdentityClient:
    """
    The process wide mock provider, emptied after every test
    """
    client = get_identity_client()
    assert isinstance(client, MockIdentityClient)
    yield client
    client.reset()
