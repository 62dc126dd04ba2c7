"""Main API router aggregating all module routers."""

from fastapi import APIRouter

from school_archive.api.v1.endpoints import archives, restore

api_router = APIRouter()

# Term archives
api_router.include_router(
    archives.router,
    prefix="/archives",
    tags=["Archives"],
)

# Archive restore
api_router.include_router(
    restore.router,
    prefix="/restore-archive",
    tags=["Restore"],
)
