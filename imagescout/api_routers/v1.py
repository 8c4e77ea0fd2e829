from fastapi import APIRouter

from imagescout.features.health.routes.health import router as health_router
from imagescout.features.image_extraction.routes.images import router as images_router

api_router = APIRouter()

# Register all feature routes
api_router.include_router(health_router)
api_router.include_router(images_router)
