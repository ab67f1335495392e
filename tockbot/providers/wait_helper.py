"""
Wait strategy helper for Selenium operations.

This module provides configurable wait strategies for Selenium WebDriver operations.
The wait mode can be configured via the WAIT_MODE environment variable.

Three modes are supported:
- FIXED: Sleep a fixed duration, then poll until the timeout (most reliable, slowest)
- EVENT_DRIVEN: Use WebDriverWait only (fastest, less reliable)
- HYBRID: Use WebDriverWait + small buffer sleep (balanced)

Unlike a plain sleep, every element wait here is bounded and raises
ElementWaitTimeout when nothing matched, so callers can decide whether a missing
element ends the attempt.
"""

import logging
import time as time_module
from typing import Any

from selenium.common.exceptions import TimeoutException
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.support import expected_conditions
from selenium.webdriver.support.ui import WebDriverWait

from tockbot.config import WaitMode, settings
from tockbot.exceptions import ElementWaitTimeout

logger = logging.getLogger(__name__)

HYBRID_BUFFER_SECONDS = 0.3
FIXED_POLL_SECONDS = 0.5


class WaitStrategy:
    """
    Provides wait methods that behave differently based on the configured wait mode.

    Usage:
        wait_strategy = WaitStrategy()
        elements = wait_strategy.wait_for_elements(driver, (By.CSS_SELECTOR, ".slot"), timeout=5.0)
        wait_strategy.wait_after_action(fixed_duration=1.0)
    """

    def __init__(self, mode: WaitMode | None = None) -> None:
        """
        Initialize the wait strategy.

        Args:
            mode: The wait mode to use. If None, uses the configured setting.
        """
        self.mode = mode or settings.wait_mode
        logger.info(f"WaitStrategy initialized with mode: {self.mode.value}")

    def wait_for_elements(
        self,
        driver: WebDriver,
        locator: tuple[str, str],
        timeout: float,
        fixed_duration: float = 1.0,
    ) -> list[Any]:
        """
        Wait for at least one element matching locator.

        Args:
            driver: The WebDriver instance
            locator: Tuple of (By.*, selector) for the elements
            timeout: Maximum wait time in every mode
            fixed_duration: Initial sleep in FIXED mode before polling, capped at timeout

        Returns:
            All matching elements in document order

        Raises:
            ElementWaitTimeout: If no element matched within the wait
        """
        if self.mode == WaitMode.FIXED:
            deadline = time_module.monotonic() + timeout
            duration = min(fixed_duration, timeout)
            logger.debug(f"FIXED mode: sleeping {duration}s for elements {locator}")
            time_module.sleep(duration)
            elements = driver.find_elements(*locator)
            # Keep looking until the full timeout has passed
            remaining = deadline - time_module.monotonic()
            while not elements and remaining > 0:
                time_module.sleep(min(FIXED_POLL_SECONDS, remaining))
                elements = driver.find_elements(*locator)
                remaining = deadline - time_module.monotonic()
            if not elements:
                logger.warning(f"FIXED mode: no elements {locator} after {timeout}s")
                raise ElementWaitTimeout(locator[1], timeout)
            return elements

        wait = WebDriverWait(driver, timeout)
        try:
            elements = wait.until(expected_conditions.presence_of_all_elements_located(locator))
            logger.debug(f"{self.mode.value} mode: {len(elements)} elements {locator} found")
        except TimeoutException as e:
            logger.warning(f"{self.mode.value} mode: timeout waiting for elements {locator}")
            raise ElementWaitTimeout(locator[1], timeout) from e

        if self.mode == WaitMode.HYBRID:
            logger.debug(f"HYBRID mode: adding {HYBRID_BUFFER_SECONDS}s buffer")
            time_module.sleep(HYBRID_BUFFER_SECONDS)

        return elements

    def wait_after_action(self, fixed_duration: float) -> None:
        """
        Pause after performing an action (click, typing) so the page can react.

        Args:
            fixed_duration: Duration to sleep in FIXED mode
        """
        if self.mode == WaitMode.FIXED:
            logger.debug(f"FIXED mode: sleeping {fixed_duration}s after action")
            time_module.sleep(fixed_duration)
        elif self.mode == WaitMode.HYBRID:
            logger.debug(f"HYBRID mode: adding {HYBRID_BUFFER_SECONDS}s buffer after action")
            time_module.sleep(HYBRID_BUFFER_SECONDS)
        else:
            logger.debug("EVENT_DRIVEN mode: skipping wait after action")

    def wait_for_staleness(
        self,
        driver: WebDriver,
        element: Any,
        fixed_duration: float,
        timeout: float,
    ) -> bool:
        """
        Wait for an element to become stale (detached from DOM).

        This is useful for waiting for DOM updates after actions that cause re-renders.

        Args:
            driver: The WebDriver instance
            element: The element to wait for staleness
            fixed_duration: Duration to sleep in FIXED mode
            timeout: Maximum wait time for WebDriverWait

        Returns:
            True if element became stale, False otherwise (or in FIXED mode)
        """
        if self.mode == WaitMode.FIXED:
            logger.debug(f"FIXED mode: sleeping {fixed_duration}s for staleness")
            time_module.sleep(fixed_duration)
            return False

        wait = WebDriverWait(driver, timeout)
        became_stale = False

        try:
            wait.until(expected_conditions.staleness_of(element))
            became_stale = True
            logger.debug(f"{self.mode.value} mode: element became stale")
        except TimeoutException:
            logger.warning(f"{self.mode.value} mode: timeout waiting for staleness")

        if self.mode == WaitMode.HYBRID:
            logger.debug(f"HYBRID mode: adding {HYBRID_BUFFER_SECONDS}s buffer after staleness")
            time_module.sleep(HYBRID_BUFFER_SECONDS)

        return became_stale


def get_wait_strategy(mode: WaitMode | None = None) -> WaitStrategy:
    """
    Factory function to get a WaitStrategy instance.

    Args:
        mode: Optional wait mode override. If None, uses configured setting.

    Returns:
        A WaitStrategy instance configured with the specified mode.
    """
    return WaitStrategy(mode)
