from fastapi import APIRouter

from collab.core.identity import router as identity
from collab.platform.healthcheck import router as healthcheck
from collab.platform.version import router as version

api_router = APIRouter()
api_router.include_router(healthcheck.router, prefix='/healthcheck', tags=['healthcheck'])
api_router.include_router(version.router, prefix='/version', tags=['version'])
api_router.include_router(identity.router, prefix='/auth', tags=['auth'])
