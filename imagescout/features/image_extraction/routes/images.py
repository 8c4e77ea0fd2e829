from typing import Literal, Optional

from fastapi import APIRouter, Query, Response, status

from imagescout.features.image_extraction.schemas.extraction import (
    ImageExtractionRequest,
    ImageExtractionResult,
)
from imagescout.features.image_extraction.services.download_service import ImageDownloadService
from imagescout.features.image_extraction.services.extraction_service import ImageExtractionService
from imagescout.platform.response import api_response

router = APIRouter(prefix="/images", tags=["images"])

extraction_service = ImageExtractionService()
download_service = ImageDownloadService()


@router.post(
    "/extract",
    response_model=dict,
    status_code=status.HTTP_200_OK,
    summary="Extract content images from a URL",
    description="Render a page in headless Chrome and return its content image URLs",
)
def extract_images(request: ImageExtractionRequest):
    """
    Extract content image URLs from a web page.

    This endpoint:
    1. Loads the provided URL in headless Chrome
    2. Collects candidates from meta tags, <img> elements and, for the
       extended profile, srcset entries and inline background images
    3. Drops avatar/profile imagery and URLs without an image extension
    4. Returns the remaining URLs in page order, without duplicates

    **Example Request:**
```json
    {
        "url": "https://www.tiktok.com/@someone/photo/123",
        "profile": "strict"
    }
```

    **Example Response:**
```json
    {
        "status_code": 200,
        "status": "success",
        "message": "Images extracted successfully",
        "data": {
            "url": "https://www.tiktok.com/@someone/photo/123",
            "profile": "strict",
            "images": ["https://p77cdn.tiktokcdn.com/obj/123.webp"],
            "total": 1
        }
    }
```
    """
    profile = extraction_service.resolve_profile(request.profile)
    images = extraction_service.extract_images(request.url, profile.name)

    result = ImageExtractionResult(
        url=request.url.strip(),
        profile=profile.name,
        images=images,
        total=len(images),
    )
    return api_response(
        data=result.model_dump(),
        message="Images extracted successfully",
        status_code=status.HTTP_200_OK,
    )


@router.get(
    "/download",
    summary="Download an extracted image",
    description="Fetch an image URL server-side with a Referer header and return its bytes",
)
async def download_image(
    url: Optional[str] = Query(default=None, description="Image URL to fetch"),
    referer: Optional[str] = Query(default=None, description="Referer header to send upstream"),
    profile: Optional[Literal["strict", "extended"]] = Query(
        default=None, description="Image rules the URL must pass. Defaults to EXTRACTION_PROFILE."
    ),
):
    image = await download_service.download(url, referer, profile)
    return Response(content=image.content, media_type=image.content_type)
