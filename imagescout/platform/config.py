from pathlib import Path
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "ImageScout"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # ── Logging ─────────────────────────────────
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # ── Extraction ──────────────────────────────
    EXTRACTION_PROFILE: Literal["strict", "extended"] = "strict"

    # Hostnames (and their subdomains) accepted by /images/extract. Empty means any host.
    ALLOWED_DOMAINS: List[str] = []

    # ── Browser ─────────────────────────────────
    PAGE_LOAD_TIMEOUT: int = 60  # seconds, applies to navigation and the load wait
    SCROLL_MAX_ROUNDS: int = 20
    SCROLL_PAUSE: float = 1.0
    SCROLL_SETTLE_DELAY: float = 2.0

    BROWSER_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    WINDOW_WIDTH: int = 1920
    WINDOW_HEIGHT: int = 1080
    BROWSER_LOCALE: str = "en-US"

    CHROMEDRIVER_PATH: Optional[str] = None
    USE_WEBDRIVER_MANAGER: bool = False

    # ── Download proxy ──────────────────────────
    DOWNLOAD_TIMEOUT: float = 30.0
    DOWNLOAD_REFERER: Optional[str] = None

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
