import os

from decouple import Choices, config

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
BASE_MODULE = 'collab'
SRC_DIR = os.path.join(BASE_DIR, BASE_MODULE)

COMPANY_NAME = config('COMPANY_NAME', default='FashionCollab')

# API Documentation
API_TITLE = config('API_TITLE', default=f'{COMPANY_NAME} API')
API_DESCRIPTION = config('API_DESCRIPTION', default='Creative project collaboration API')

HOST = 'http://127.0.0.1'
DEBUG = config('DEBUG', default=False, cast=bool)
ENVIRONMENT = config(
    'ENVIRONMENT', default='local', cast=Choices(['local', 'testing', 'demo', 'staging', 'production'])
)
IS_LOCAL = ENVIRONMENT == 'local'
IS_PRODUCTION = ENVIRONMENT == 'production'
IS_STAGING = ENVIRONMENT == 'staging'
IS_DEMO = ENVIRONMENT == 'demo'
IS_TESTING = ENVIRONMENT == 'testing'  # Set in tests/conftest.py
IS_DEPLOYED_ENV = IS_PRODUCTION or IS_STAGING or IS_DEMO

BACKEND_CORS_ORIGINS = config(
    'BACKEND_CORS_ORIGINS', default='http://localhost:5173', cast=lambda v: list(v.split(','))
)
CORS_ALLOWED_METHODS = config(
    'CORS_ALLOWED_METHODS', default='GET,POST,PUT,PATCH,DELETE,OPTIONS', cast=lambda v: list(v.split(','))
)
CORS_ALLOWED_HEADERS = config(
    'CORS_ALLOWED_HEADERS',
    default='Accept,Accept-Language,Content-Type,Content-Language,Authorization,X-Requested-With',
    cast=lambda v: list(v.split(',')),
)

# Security Headers Configuration
ENABLE_SECURITY_HEADERS = config('ENABLE_SECURITY_HEADERS', default=True, cast=bool)
# Only enable HSTS in production environments to avoid development issues
ENABLE_HSTS = config('ENABLE_HSTS', default=IS_DEPLOYED_ENV, cast=bool)
CSP_POLICY = config(
    'CSP_POLICY',
    default=(
        "default-src 'self'; "
        "img-src 'self' data: https:; "
        "connect-src 'self'; "
        "frame-ancestors 'none'; "
        "base-uri 'self'; "
        "form-action 'self'"
    ),
)

API_PREFIX = ''

ATOMIC_REQUESTS = config('ATOMIC_REQUESTS', default=True, cast=bool)
LOG_LEVEL = config('LOG_LEVEL', 'INFO')

# Support both DATABASE_URL (hosted) and individual vars (local)
DATABASE_URL = config('DATABASE_URL', default=None)
if not DATABASE_URL:
    from sqlalchemy.engine.url import URL

    DATABASE_URL = URL.create(
        drivername='postgresql',
        username=config('DB_USER', default='collab'),
        password=config('DB_PASSWORD', default='dev1'),
        host=config('DB_HOST', default='127.0.0.1'),
        port=config('DB_PORT', default=5432, cast=int),
        database=config('DB_NAME', default='collab'),
    ).render_as_string(hide_password=False)
DB_LOG_STATEMENTS = config('DB_LOG_STATEMENTS', default=False, cast=bool)

# Define boundaries, each must expose a models.py
BOUNDARIES = [
    'core.membership',
    'app.projects',
]

# Identity provider (Supabase style GoTrue API)
IDENTITY_PROVIDER_URL = config('IDENTITY_PROVIDER_URL', default='http://localhost:54321')
IDENTITY_SERVICE_ROLE_KEY = config('IDENTITY_SERVICE_ROLE_KEY', default=None)
IDENTITY_JWT_SECRET = config('IDENTITY_JWT_SECRET', default='super-secret-jwt-token')
IDENTITY_JWT_AUDIENCE = config('IDENTITY_JWT_AUDIENCE', default='authenticated')
IDENTITY_REQUEST_TIMEOUT = config('IDENTITY_REQUEST_TIMEOUT', default=10, cast=int)
IDENTITY_ADMIN_PAGE_SIZE = config('IDENTITY_ADMIN_PAGE_SIZE', default=200, cast=int)

# Sentry
SENTRY_DSN = config('SENTRY_DSN', default=None)
SENTRY_DEFAULT_SAMPLE_RATE = config('SENTRY_DEFAULT_SAMPLE_RATE', default=1, cast=int)

# Mocks
USE_MOCK_SENTRY_CLIENT = config('USE_MOCK_SENTRY_CLIENT', default=False, cast=bool)
USE_MOCK_IDENTITY_CLIENT = config('USE_MOCK_IDENTITY_CLIENT', default=False, cast=bool)
