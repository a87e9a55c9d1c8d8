from fastapi import APIRouter

from collab.app.projects.router import router as projects_router

# Create the root API router
api_router = APIRouter()

# Include domain routers
api_router.include_router(projects_router, prefix='/projects', tags=['projects'])
