from typing import List, Optional, Sequence
from urllib.parse import urlparse

from selenium.common.exceptions import WebDriverException

from imagescout.features.image_extraction.services.collector_service import ImageCollectorService
from imagescout.features.image_extraction.services.image_rules import filter_images
from imagescout.features.image_extraction.services.page_loader_service import PageLoaderService
from imagescout.features.image_extraction.services.profiles import ExtractionProfile, get_profile
from imagescout.platform.config import settings
from imagescout.platform.exceptions import (
    InvalidDomainError,
    MissingInputError,
    RenderFailureError,
)
from imagescout.platform.logger import get_logger

logger = get_logger(__name__)


def is_allowed_domain(url: str, allowed_domains: Sequence[str]) -> bool:
    """True when the URL's host is one of `allowed_domains` or a subdomain of one."""
    if not allowed_domains:
        return True
    try:
        host = (urlparse(url).hostname or "").lower()
    except ValueError:
        return False
    if not host:
        return False
    for domain in allowed_domains:
        domain = domain.lower().lstrip(".")
        if host == domain or host.endswith("." + domain):
            return True
    return False


class ImageExtractionService:
    """Loads a page, collects candidate image URLs and keeps the valid ones"""

    def __init__(
        self,
        page_loader=PageLoaderService,
        allowed_domains: Optional[Sequence[str]] = None,
    ):
        self.page_loader = page_loader
        self.allowed_domains = settings.ALLOWED_DOMAINS if allowed_domains is None else allowed_domains

    def resolve_profile(self, profile_name: Optional[str]) -> ExtractionProfile:
        return get_profile(profile_name or settings.EXTRACTION_PROFILE)

    def validate_request(self, url: Optional[str]) -> str:
        if not url or not url.strip():
            raise MissingInputError()
        url = url.strip()
        if not is_allowed_domain(url, self.allowed_domains):
            raise InvalidDomainError(
                f"URL must be on one of: {', '.join(self.allowed_domains)}"
            )
        return url

    def extract_images(self, url: Optional[str], profile_name: Optional[str] = None) -> List[str]:
        """
        Extract content image URLs from a page.

        Input problems are rejected before any browser is launched. The browser
        session is released before this returns, whatever the outcome.

        Raises:
            MissingInputError: No URL given
            InvalidDomainError: URL host outside ALLOWED_DOMAINS
            UnknownProfileError: Profile name not registered
            RenderFailureError: Browser launch, navigation or scan failed
        """
        url = self.validate_request(url)
        profile = self.resolve_profile(profile_name)
        collector = ImageCollectorService(profile.collector)

        try:
            with self.page_loader.browser_session(
                url, scroll=profile.collector.scroll_to_bottom
            ) as driver:
                candidates = collector.collect(driver, url)
        except WebDriverException as e:
            logger.error(f"Rendering {url} failed: {e.msg or e.__class__.__name__}")
            raise RenderFailureError() from e

        images = filter_images(candidates, profile.rules)
        logger.info(
            f"Kept {len(images)} of {len(candidates)} candidates from {url} "
            f"(profile={profile.name})"
        )
        return images
