import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from imagescout.api_routers.v1 import api_router
from imagescout.features.health.routes.health import router as health_router
from imagescout.platform.config import settings
from imagescout.platform.exceptions import add_exception_handlers

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

app = FastAPI(
    title="ImageScout API",
    description="Extract content image URLs from rendered web pages",
    version="1.0.0",
    debug=settings.DEBUG,
)


@app.get("/", tags=["Info"])
def root():
    return {
        "app_name": "ImageScout API",
        "description": "Headless-browser image extraction with avatar filtering.",
        "version": "1.0.0",
        "docs_url": "/docs",
        "api_base": "/api/v1",
    }


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

app.include_router(health_router)
app.include_router(api_router, prefix="/api/v1")
