import uvicorn

from imagescout.platform.config import settings


if __name__ == "__main__":
    uvicorn.run(
        "imagescout.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "local",
    )
