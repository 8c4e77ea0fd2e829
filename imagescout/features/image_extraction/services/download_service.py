import ipaddress
from typing import Optional
from urllib.parse import urlparse

import httpx
from pydantic import BaseModel

from imagescout.features.image_extraction.services.image_rules import is_valid_image
from imagescout.features.image_extraction.services.profiles import get_profile
from imagescout.platform.config import settings
from imagescout.platform.exceptions import (
    DownloadFailureError,
    InvalidImageURLError,
    MissingInputError,
)
from imagescout.platform.logger import get_logger

logger = get_logger(__name__)


class DownloadedImage(BaseModel):
    content: bytes
    content_type: str


def default_referer(url: str) -> Optional[str]:
    """Origin of the image URL, used when no referer is configured."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}/"


def is_internal_host(host: str) -> bool:
    """localhost and non-public IP literals (loopback, private, link-local, reserved)."""
    if host == "localhost" or host.endswith(".localhost"):
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return not address.is_global


class ImageDownloadService:
    """Fetches an extracted image through httpx on behalf of the client"""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    def build_headers(self, url: str, referer: Optional[str]) -> dict:
        headers = {"User-Agent": settings.BROWSER_USER_AGENT}
        referer = referer or settings.DOWNLOAD_REFERER or default_referer(url)
        if referer:
            headers["Referer"] = referer
        return headers

    def validate_url(self, url: Optional[str], profile_name: Optional[str] = None) -> str:
        """
        Accept only http(s) URLs on public hosts that pass the image rules of
        the profile (EXTRACTION_PROFILE when none is given).

        Raises:
            MissingInputError: No URL given
            InvalidImageURLError: Malformed, non-http(s), internal host, or not an image URL
        """
        if not url or not url.strip():
            raise MissingInputError()
        url = url.strip()

        try:
            parsed = urlparse(url)
            host = (parsed.hostname or "").lower()
        except ValueError:
            raise InvalidImageURLError("Malformed image URL") from None

        if parsed.scheme not in ("http", "https") or not host:
            raise InvalidImageURLError("Image URL must be an absolute http(s) URL")
        if is_internal_host(host):
            raise InvalidImageURLError("Image URL must point to a public host")

        rules = get_profile(profile_name or settings.EXTRACTION_PROFILE).rules
        if not is_valid_image(url, rules):
            raise InvalidImageURLError()
        return url

    async def _reject_internal_hops(self, request: httpx.Request) -> None:
        # Also runs for every redirect hop
        if is_internal_host((request.url.host or "").lower()):
            raise InvalidImageURLError("Image URL must point to a public host")

    async def download(
        self,
        url: Optional[str],
        referer: Optional[str] = None,
        profile_name: Optional[str] = None,
    ) -> DownloadedImage:
        url = self.validate_url(url, profile_name)

        try:
            async with httpx.AsyncClient(
                timeout=settings.DOWNLOAD_TIMEOUT,
                follow_redirects=True,
                transport=self.transport,
                event_hooks={"request": [self._reject_internal_hops]},
            ) as client:
                response = await client.get(url, headers=self.build_headers(url, referer))
                response.raise_for_status()
        except httpx.InvalidURL as e:
            raise InvalidImageURLError("Malformed image URL") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"Download of {url} returned {e.response.status_code}")
            raise DownloadFailureError() from e
        except httpx.HTTPError as e:
            logger.error(f"Download of {url} failed: {e}")
            raise DownloadFailureError() from e

        return DownloadedImage(
            content=response.content,
            content_type=response.headers.get("content-type", "application/octet-stream"),
        )
