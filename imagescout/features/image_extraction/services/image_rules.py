from typing import Iterable, List, Literal, Tuple

from pydantic import BaseModel, ConfigDict


ExtensionMatch = Literal["suffix", "substring"]


class ImageRules(BaseModel):
    """Keyword blocklist and extension policy used to accept a candidate URL."""

    model_config = ConfigDict(frozen=True)

    blocked_keywords: Tuple[str, ...]
    allowed_extensions: Tuple[str, ...]
    extension_match: ExtensionMatch = "suffix"


# Profile/avatar markers. p16/p19/p23-sign are TikTok's signed avatar CDN hosts.
BASE_BLOCKED_KEYWORDS = (
    "avatar",
    "profile",
    "userpic",
    "default_avatar",
    "headshot",
    "p16-sign",
    "p19-sign",
    "p23-sign",
)

STRICT_RULES = ImageRules(
    blocked_keywords=BASE_BLOCKED_KEYWORDS,
    allowed_extensions=(".jpg", ".jpeg", ".png", ".webp"),
    extension_match="suffix",
)

EXTENDED_RULES = ImageRules(
    blocked_keywords=BASE_BLOCKED_KEYWORDS + ("user-avatar", "_720x720", "_100x100"),
    allowed_extensions=(".jpg", ".jpeg", ".png", ".webp", ".gif"),
    extension_match="substring",
)


def _has_allowed_extension(lowered: str, rules: ImageRules) -> bool:
    if rules.extension_match == "suffix":
        return lowered.endswith(rules.allowed_extensions)
    return any(ext in lowered for ext in rules.allowed_extensions)


def is_valid_image(url, rules: ImageRules = STRICT_RULES) -> bool:
    """
    Decide whether a candidate URL is a content image.

    The URL is lower-cased for matching only. Rejected when it is empty or not a
    string, when it contains any blocked keyword, or when no allowed extension
    matches under the rules' matching mode.

    Example:
        is_valid_image("https://p77cdn.tiktokcdn.com/obj/123.webp")  # True
        is_valid_image("https://p16-sign.tiktokcdn.com/foo.jpg")     # False
    """
    if not url or not isinstance(url, str):
        return False

    lowered = url.lower()

    if any(keyword in lowered for keyword in rules.blocked_keywords):
        return False

    return _has_allowed_extension(lowered, rules)


def filter_images(urls: Iterable[str], rules: ImageRules = STRICT_RULES) -> List[str]:
    """Accepted URLs in first-seen order, exact duplicates dropped."""
    accepted: List[str] = []
    seen = set()
    for url in urls:
        if not is_valid_image(url, rules) or url in seen:
            continue
        seen.add(url)
        accepted.append(url)
    return accepted
