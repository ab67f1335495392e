import asyncio
import functools
import logging
import os
import time as time_module
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from selenium import webdriver
from selenium.common.exceptions import (
    ElementClickInterceptedException,
    NoSuchElementException,
    StaleElementReferenceException,
    TimeoutException,
)
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions
from selenium.webdriver.support.ui import WebDriverWait
from webdriver_manager.chrome import ChromeDriverManager

from tockbot.exceptions import ElementWaitTimeout
from tockbot.providers.base import ElementHandle, PageDriver
from tockbot.providers.wait_helper import WaitStrategy, get_wait_strategy

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_EXCEPTIONS = (
    StaleElementReferenceException,
    ElementClickInterceptedException,
)

# Collects every attribute of an element into a plain object
ATTRIBUTES_SCRIPT = """
var attrs = {};
for (var i = 0; i < arguments[0].attributes.length; i++) {
    var attr = arguments[0].attributes[i];
    attrs[attr.name] = attr.value;
}
return attrs;
"""


def with_retry(
    max_attempts: int = 3,
    backoff_base: float = 0.5,
    exceptions: tuple[type[Exception], ...] = TRANSIENT_EXCEPTIONS,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator for retrying operations that may fail due to transient Selenium issues.

    Uses exponential backoff between attempts. Only retries on specified exception types.

    Args:
        max_attempts: Maximum number of attempts (default 3)
        backoff_base: Base delay in seconds, doubled each attempt (default 0.5)
        exceptions: Tuple of exception types to retry on
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            last_exception: Exception | None = None
            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if attempt < max_attempts - 1:
                        delay = backoff_base * (2**attempt)
                        logger.warning(
                            f"Attempt {attempt + 1}/{max_attempts} failed for {func.__name__}: "
                            f"{e}. Retrying in {delay:.1f}s..."
                        )
                        time_module.sleep(delay)
                    else:
                        logger.error(
                            f"All {max_attempts} attempts failed for {func.__name__}: {e}"
                        )
            raise last_exception  # type: ignore[misc]

        return wrapper

    return decorator


class SeleniumPageDriver(PageDriver):
    """
    Chrome-backed page driver for the Tock booking flow.

    One browser session is kept for the whole run so the Tock login cookie
    survives between attempts. Blocking Selenium calls are run with
    asyncio.to_thread() so the orchestrator stays a plain coroutine. Calls are
    strictly sequential, so the session is never driven from two threads at once.
    """

    ACTION_SETTLE_SECONDS = 1.0

    def __init__(
        self,
        headless: bool = True,
        wait_strategy: WaitStrategy | None = None,
        driver_factory: Callable[[], webdriver.Chrome] | None = None,
    ) -> None:
        self.headless = headless
        self.wait_strategy = wait_strategy or get_wait_strategy()
        self._driver_factory = driver_factory or self._create_driver
        self._driver: webdriver.Chrome | None = None

    @property
    def driver(self) -> webdriver.Chrome:
        """Lazily start the browser on first use."""
        if self._driver is None:
            self._driver = self._driver_factory()
        return self._driver

    def _create_driver(self) -> webdriver.Chrome:
        """Create a Chrome WebDriver instance."""
        options = Options()
        if self.headless:
            options.add_argument("--headless=new")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        options.add_argument("--disable-gpu")
        options.add_argument("--window-size=1920,1080")
        options.add_argument("--disable-blink-features=AutomationControlled")
        options.add_experimental_option("excludeSwitches", ["enable-automation"])
        options.add_experimental_option("useAutomationExtension", False)

        # Check for ChromeDriver path from environment variable first,
        # then fall back to ChromeDriverManager for automatic version management
        chromedriver_path = os.environ.get("CHROMEDRIVER_PATH")
        if chromedriver_path and os.path.exists(chromedriver_path):
            service = Service(chromedriver_path)
        else:
            service = Service(ChromeDriverManager().install())
        driver = webdriver.Chrome(service=service, options=options)

        driver.execute_cdp_cmd(
            "Page.addScriptToEvaluateOnNewDocument",
            {
                "source": """
                Object.defineProperty(navigator, 'webdriver', {
                    get: () => undefined
                })
            """
            },
        )

        return driver

    @contextmanager
    def _in_frame(self, frame: str | None, timeout: float = 0.0) -> Iterator[None]:
        """Switch into the iframe matching frame for the duration of the block."""
        if frame is None:
            yield
            return

        if timeout > 0:
            wait = WebDriverWait(self.driver, timeout)
            try:
                wait.until(
                    expected_conditions.frame_to_be_available_and_switch_to_it(
                        (By.CSS_SELECTOR, frame)
                    )
                )
            except TimeoutException as e:
                raise ElementWaitTimeout(frame, timeout) from e
        else:
            self.driver.switch_to.frame(self.driver.find_element(By.CSS_SELECTOR, frame))

        try:
            yield
        finally:
            self.driver.switch_to.default_content()

    def _to_handle(self, element: Any, frame: str | None) -> ElementHandle:
        attributes = self.driver.execute_script(ATTRIBUTES_SCRIPT, element) or {}
        return ElementHandle(
            label=attributes.get("aria-label", ""),
            text=element.text.strip(),
            attributes=attributes,
            ref=element,
            frame=frame,
        )

    async def navigate(self, url: str) -> None:
        logger.info(f"Navigating to {url}")
        await asyncio.to_thread(self.driver.get, url)

    async def query_elements(self, selector: str, frame: str | None = None) -> list[ElementHandle]:
        return await asyncio.to_thread(self._query_elements_sync, selector, frame)

    def _query_elements_sync(self, selector: str, frame: str | None) -> list[ElementHandle]:
        try:
            with self._in_frame(frame):
                elements = self.driver.find_elements(By.CSS_SELECTOR, selector)
                return [self._to_handle(element, frame) for element in elements]
        except NoSuchElementException:
            logger.debug(f"Frame {frame} not present while querying {selector}")
            return []

    async def wait_for(
        self, selector: str, timeout_ms: int, frame: str | None = None
    ) -> list[ElementHandle]:
        return await asyncio.to_thread(self._wait_for_sync, selector, timeout_ms / 1000, frame)

    @with_retry()
    def _wait_for_sync(
        self, selector: str, timeout: float, frame: str | None
    ) -> list[ElementHandle]:
        deadline = time_module.monotonic() + timeout
        with self._in_frame(frame, timeout):
            # The frame and the element inside it share one deadline
            remaining = max(deadline - time_module.monotonic(), 0.0) if frame else timeout
            elements = self.wait_strategy.wait_for_elements(
                self.driver, (By.CSS_SELECTOR, selector), timeout=remaining
            )
            return [self._to_handle(element, frame) for element in elements]

    async def wait_until_stale(self, element: ElementHandle, timeout_ms: int) -> bool:
        return await asyncio.to_thread(
            self.wait_strategy.wait_for_staleness,
            self.driver,
            element.ref,
            fixed_duration=self.ACTION_SETTLE_SECONDS,
            timeout=timeout_ms / 1000,
        )

    async def click(self, element: ElementHandle) -> None:
        await asyncio.to_thread(self._click_sync, element)

    @with_retry()
    def _click_sync(self, element: ElementHandle) -> None:
        with self._in_frame(element.frame):
            element.ref.click()
        self.wait_strategy.wait_after_action(fixed_duration=self.ACTION_SETTLE_SECONDS)

    async def type_text(self, element: ElementHandle, text: str) -> None:
        await asyncio.to_thread(self._type_text_sync, element, text)

    @with_retry()
    def _type_text_sync(self, element: ElementHandle, text: str) -> None:
        with self._in_frame(element.frame):
            element.ref.send_keys(text)

    async def close(self) -> None:
        """Quit the browser if it was started."""
        if self._driver is not None:
            driver, self._driver = self._driver, None
            await asyncio.to_thread(driver.quit)
