import re
from typing import Dict, Iterable, List, Optional

from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.webdriver import WebDriver
from selenium.webdriver.common.by import By

from imagescout.features.image_extraction.services.profiles import CollectorOptions
from imagescout.platform.logger import get_logger

logger = get_logger(__name__)


META_IMAGE_SELECTORS = [
    "meta[property='og:image']",
    "meta[name='twitter:image']",
    "meta[itemprop='image']",
]

BACKGROUND_URL_PATTERN = re.compile(
    r"""background-image\s*:\s*url\(\s*['"]?(.*?)['"]?\s*\)""", re.IGNORECASE
)

# Runs inside the page. Returns raw attribute values only; parsing happens in Python.
SCAN_SCRIPT = """
const srcsets = [];
document.querySelectorAll('img[srcset]').forEach(function (img) {
    const value = img.getAttribute('srcset');
    if (value) { srcsets.push(value); }
});
const styles = [];
document.querySelectorAll('div[style], section[style], article[style]').forEach(function (el) {
    const value = el.getAttribute('style');
    if (value && value.toLowerCase().indexOf('background-image') !== -1) { styles.push(value); }
});
return {srcsets: srcsets, styles: styles};
"""


def parse_srcset(value: Optional[str]) -> List[str]:
    """
    URLs of a srcset attribute, in order.

    Example:
        parse_srcset("a.jpg 1x, b.jpg 2x")  # ["a.jpg", "b.jpg"]
    """
    if not value:
        return []
    urls = []
    for entry in value.split(","):
        tokens = entry.split()
        if tokens:
            urls.append(tokens[0])
    return urls


def parse_background_image(style: Optional[str]) -> Optional[str]:
    """URL of the background-image declaration in an inline style, quotes stripped."""
    if not style or "background-image" not in style.lower():
        return None
    match = BACKGROUND_URL_PATTERN.search(style)
    if not match or not match.group(1):
        return None
    return match.group(1)


class CandidateSet:
    """Insertion-ordered set of candidate URLs, compared by exact string value."""

    def __init__(self):
        self._urls: Dict[str, None] = {}

    def add(self, url: Optional[str]) -> bool:
        if not url or url in self._urls:
            return False
        self._urls[url] = None
        return True

    def extend(self, urls: Iterable[Optional[str]]) -> None:
        for url in urls:
            self.add(url)

    def __contains__(self, url) -> bool:
        return url in self._urls

    def __len__(self) -> int:
        return len(self._urls)

    def to_list(self) -> List[str]:
        return list(self._urls)


class ImageCollectorService:
    """Enumerates raw candidate image URLs from a rendered page"""

    def __init__(self, options: CollectorOptions):
        self.options = options

    def collect(self, driver: WebDriver, page_url: str = "") -> List[str]:
        """
        Scan the page in priority order: metadata tags, <img src>, then (when
        enabled) srcset entries and inline background images.

        Returns:
            List[str]: Unfiltered candidates, first-seen order, no duplicates
        """
        candidates = CandidateSet()

        candidates.extend(self._collect_meta_images(driver))
        candidates.extend(self._collect_img_sources(driver))

        if self.options.scan_srcset or self.options.scan_backgrounds:
            scanned = self._scan_document(driver, page_url)
            if self.options.scan_srcset:
                for srcset in scanned.get("srcsets") or []:
                    candidates.extend(parse_srcset(srcset))
            if self.options.scan_backgrounds:
                for style in scanned.get("styles") or []:
                    candidates.add(parse_background_image(style))

        logger.info(f"Collected {len(candidates)} candidate image URLs from {page_url}")
        return candidates.to_list()

    def _collect_meta_images(self, driver: WebDriver) -> List[str]:
        urls = []
        for selector in META_IMAGE_SELECTORS:
            for element in driver.find_elements(By.CSS_SELECTOR, selector):
                try:
                    content = element.get_attribute("content")
                except WebDriverException as e:
                    logger.debug(f"Skipping unreadable {selector}: {e}")
                    continue
                if content:
                    urls.append(content)
        return urls

    def _collect_img_sources(self, driver: WebDriver) -> List[str]:
        urls = []
        for img in driver.find_elements(By.TAG_NAME, "img"):
            try:
                src = img.get_attribute("src")
                if not src:
                    continue
                if not self._is_large_enough(img):
                    continue
            except WebDriverException as e:
                logger.debug(f"Skipping unreadable <img>: {e}")
                continue
            urls.append(src)
        return urls

    def _is_large_enough(self, img) -> bool:
        min_width = self.options.min_width
        min_height = self.options.min_height
        if min_width is None and min_height is None:
            return True

        rect = img.rect
        if not rect:
            return False
        width = rect.get("width") or 0
        height = rect.get("height") or 0
        if min_width is not None and width < min_width:
            return False
        if min_height is not None and height < min_height:
            return False
        return True

    def _scan_document(self, driver: WebDriver, page_url: str) -> dict:
        try:
            result = driver.execute_script(SCAN_SCRIPT)
        except WebDriverException as e:
            logger.warning(f"In-page image scan failed on {page_url}: {e}")
            return {}
        return result if isinstance(result, dict) else {}
