from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict

from imagescout.features.image_extraction.services.image_rules import (
    EXTENDED_RULES,
    STRICT_RULES,
    ImageRules,
)
from imagescout.platform.exceptions import UnknownProfileError


class CollectorOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Rendered size floor for <img> elements; None disables the geometry check
    min_width: Optional[int] = None
    min_height: Optional[int] = None
    scan_srcset: bool = False
    scan_backgrounds: bool = False
    scroll_to_bottom: bool = False


class ExtractionProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    rules: ImageRules
    collector: CollectorOptions


STRICT_PROFILE = ExtractionProfile(
    name="strict",
    rules=STRICT_RULES,
    collector=CollectorOptions(min_width=100, min_height=100),
)

EXTENDED_PROFILE = ExtractionProfile(
    name="extended",
    rules=EXTENDED_RULES,
    collector=CollectorOptions(
        scan_srcset=True,
        scan_backgrounds=True,
        scroll_to_bottom=True,
    ),
)

PROFILES: Dict[str, ExtractionProfile] = {
    STRICT_PROFILE.name: STRICT_PROFILE,
    EXTENDED_PROFILE.name: EXTENDED_PROFILE,
}


def get_profile(name: str) -> ExtractionProfile:
    try:
        return PROFILES[name]
    except KeyError:
        raise UnknownProfileError(
            f"Unknown extraction profile '{name}'. Expected one of: {', '.join(PROFILES)}"
        ) from None
