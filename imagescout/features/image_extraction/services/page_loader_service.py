import time
from contextlib import contextmanager
from typing import Iterator, Optional

from selenium import webdriver
from selenium.common.exceptions import TimeoutException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.chrome.webdriver import WebDriver
from selenium.webdriver.support.ui import WebDriverWait
from webdriver_manager.chrome import ChromeDriverManager

from imagescout.platform.config import settings
from imagescout.platform.logger import get_logger

logger = get_logger(__name__)


class PageLoaderService:
    """Service for loading web pages using Selenium WebDriver"""

    @staticmethod
    def build_driver() -> WebDriver:
        """
        Create a headless Chrome driver with a desktop browsing context.

        Driver binary resolution: CHROMEDRIVER_PATH if set, else webdriver-manager
        when USE_WEBDRIVER_MANAGER is on, else Selenium Manager.
        """
        chrome_options = Options()
        chrome_options.add_argument("--headless=new")
        chrome_options.add_argument("--disable-gpu")
        chrome_options.add_argument("--no-sandbox")
        chrome_options.add_argument("--disable-dev-shm-usage")
        chrome_options.add_argument("--disable-blink-features=AutomationControlled")
        chrome_options.add_argument(f"--user-agent={settings.BROWSER_USER_AGENT}")
        chrome_options.add_argument(f"--window-size={settings.WINDOW_WIDTH},{settings.WINDOW_HEIGHT}")
        chrome_options.add_argument(f"--lang={settings.BROWSER_LOCALE}")
        chrome_options.add_argument("--force-prefers-color-scheme=light")
        chrome_options.add_experimental_option(
            "prefs", {"intl.accept_languages": settings.BROWSER_LOCALE}
        )

        if settings.CHROMEDRIVER_PATH:
            service = Service(executable_path=settings.CHROMEDRIVER_PATH)
            return webdriver.Chrome(service=service, options=chrome_options)

        if settings.USE_WEBDRIVER_MANAGER:
            service = Service(ChromeDriverManager().install())
            return webdriver.Chrome(service=service, options=chrome_options)

        return webdriver.Chrome(options=chrome_options)

    @staticmethod
    def load_page(driver: WebDriver, url: str, timeout: int) -> None:
        """
        Navigate and wait until the document reports it is fully loaded.

        Raises:
            TimeoutException: If navigation or the load wait exceeds `timeout`
            WebDriverException: If the browser fails to navigate
        """
        driver.set_page_load_timeout(timeout)
        logger.info(f"Navigating to {url}")
        driver.get(url)
        WebDriverWait(driver, timeout).until(
            lambda d: d.execute_script("return document.readyState") == "complete"
        )

    @staticmethod
    def scroll_to_bottom(
        driver: WebDriver,
        max_rounds: int,
        pause: float,
        settle_delay: float,
    ) -> int:
        """
        Scroll until the document height stops growing so lazy images attach,
        then wait `settle_delay` seconds. Returns the number of scroll rounds.
        """
        last_height = driver.execute_script("return document.body.scrollHeight")
        rounds = 0
        while rounds < max_rounds:
            driver.execute_script("window.scrollTo(0, document.body.scrollHeight);")
            rounds += 1
            time.sleep(pause)
            new_height = driver.execute_script("return document.body.scrollHeight")
            if new_height == last_height:
                break
            last_height = new_height

        time.sleep(settle_delay)
        logger.debug(f"Scrolled {rounds} rounds, final height {last_height}")
        return rounds

    @staticmethod
    def quit_driver(driver: Optional[WebDriver]) -> None:
        if driver is None:
            return
        try:
            driver.quit()
        except Exception as e:
            logger.warning(f"Error while closing browser: {e}")

    @staticmethod
    @contextmanager
    def browser_session(
        url: str,
        timeout: Optional[int] = None,
        scroll: bool = False,
    ) -> Iterator[WebDriver]:
        """
        Open a browser on `url` and release it exactly once on exit.

        Example:
            with PageLoaderService.browser_session("https://example.com") as driver:
                urls = collector.collect(driver)
        """
        timeout = timeout or settings.PAGE_LOAD_TIMEOUT
        driver = PageLoaderService.build_driver()
        try:
            try:
                PageLoaderService.load_page(driver, url, timeout)
            except TimeoutException:
                raise TimeoutException(f"Page load timeout after {timeout} seconds for URL: {url}")

            if scroll:
                PageLoaderService.scroll_to_bottom(
                    driver,
                    max_rounds=settings.SCROLL_MAX_ROUNDS,
                    pause=settings.SCROLL_PAUSE,
                    settle_delay=settings.SCROLL_SETTLE_DELAY,
                )

            yield driver
        finally:
            PageLoaderService.quit_driver(driver)
