from fastapi import APIRouter

from .routes import batches, health, quality, tasks, workers

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])

# Production floor
api_router.include_router(workers.router)
api_router.include_router(tasks.router)
api_router.include_router(batches.router)

# Quality control
api_router.include_router(quality.router)
