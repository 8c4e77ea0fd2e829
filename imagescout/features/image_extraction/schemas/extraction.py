from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ImageExtractionRequest(BaseModel):
    # Optional so a missing URL reaches the handler and returns 400, not 422
    url: Optional[str] = None
    profile: Optional[Literal["strict", "extended"]] = Field(
        default=None,
        description="Rule profile to apply. Defaults to the EXTRACTION_PROFILE setting.",
    )


class ImageExtractionResult(BaseModel):
    url: str
    profile: str
    images: List[str]
    total: int
