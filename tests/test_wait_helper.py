"""
Tests for the wait strategy helper module.

These tests verify the WaitMode enum, WaitStrategy class, and the
bounded wait behavior for Selenium operations.
"""

from unittest.mock import MagicMock, patch

import pytest
from selenium.common.exceptions import TimeoutException

from tockbot.config import WaitMode
from tockbot.exceptions import ElementWaitTimeout
from tests.fixtures.clock import FakeClock
from tockbot.providers.wait_helper import (
    FIXED_POLL_SECONDS,
    HYBRID_BUFFER_SECONDS,
    WaitStrategy,
    get_wait_strategy,
)

LOCATOR = ("css selector", "[data-testid=consumer-calendar-day]")


class TestWaitModeEnum:
    """Tests for the WaitMode enum."""

    def test_wait_mode_from_string(self) -> None:
        """Test that WaitMode can be created from string values."""
        assert WaitMode("fixed") == WaitMode.FIXED
        assert WaitMode("event_driven") == WaitMode.EVENT_DRIVEN
        assert WaitMode("hybrid") == WaitMode.HYBRID


class TestWaitStrategyInit:
    """Tests for WaitStrategy initialization."""

    def test_init_with_explicit_mode(self) -> None:
        """Test initialization with explicit FIXED mode."""
        strategy = WaitStrategy(mode=WaitMode.FIXED)
        assert strategy.mode == WaitMode.FIXED

    def test_init_uses_settings_when_no_mode_provided(self) -> None:
        """Test that init uses settings.wait_mode when no mode is provided."""
        with patch("tockbot.providers.wait_helper.settings") as mock_settings:
            mock_settings.wait_mode = WaitMode.HYBRID
            strategy = WaitStrategy()
            assert strategy.mode == WaitMode.HYBRID

    def test_factory_returns_configured_strategy(self) -> None:
        strategy = get_wait_strategy(WaitMode.EVENT_DRIVEN)
        assert isinstance(strategy, WaitStrategy)
        assert strategy.mode == WaitMode.EVENT_DRIVEN


class TestWaitStrategyWaitForElements:
    """Tests for WaitStrategy.wait_for_elements method."""

    @pytest.fixture
    def mock_driver(self) -> MagicMock:
        """Create a mock WebDriver."""
        return MagicMock()

    def test_fixed_mode_sleeps_then_finds(self, mock_driver: MagicMock) -> None:
        """Test that FIXED mode sleeps for the duration then looks once."""
        strategy = WaitStrategy(mode=WaitMode.FIXED)
        elements = [MagicMock(), MagicMock()]
        mock_driver.find_elements.return_value = elements

        with patch("tockbot.providers.wait_helper.time_module.sleep") as mock_sleep:
            result = strategy.wait_for_elements(
                mock_driver, LOCATOR, timeout=5.0, fixed_duration=2.0
            )

        mock_sleep.assert_called_once_with(2.0)
        mock_driver.find_elements.assert_called_once_with(*LOCATOR)
        assert result == elements

    def test_fixed_mode_sleep_capped_by_timeout(self, mock_driver: MagicMock) -> None:
        strategy = WaitStrategy(mode=WaitMode.FIXED)
        mock_driver.find_elements.return_value = [MagicMock()]

        with patch("tockbot.providers.wait_helper.time_module.sleep") as mock_sleep:
            strategy.wait_for_elements(mock_driver, LOCATOR, timeout=0.5, fixed_duration=2.0)

        mock_sleep.assert_called_once_with(0.5)

    def test_fixed_mode_raises_when_nothing_found(self, mock_driver: MagicMock) -> None:
        strategy = WaitStrategy(mode=WaitMode.FIXED)
        mock_driver.find_elements.return_value = []
        clock = FakeClock()

        with patch("tockbot.providers.wait_helper.time_module", clock):
            with pytest.raises(ElementWaitTimeout) as exc_info:
                strategy.wait_for_elements(mock_driver, LOCATOR, timeout=5.0)

        assert exc_info.value.selector == LOCATOR[1]
        assert exc_info.value.timeout_seconds == 5.0
        assert clock.now == pytest.approx(5.0)

    def test_fixed_mode_keeps_polling_until_timeout(self, mock_driver: MagicMock) -> None:
        """Test that a slow element is still found after the initial sleep."""
        strategy = WaitStrategy(mode=WaitMode.FIXED)
        element = MagicMock()
        mock_driver.find_elements.side_effect = [[], [], [element]]
        clock = FakeClock()

        with patch("tockbot.providers.wait_helper.time_module", clock):
            result = strategy.wait_for_elements(mock_driver, LOCATOR, timeout=10.0)

        assert result == [element]
        assert mock_driver.find_elements.call_count == 3
        assert clock.sleeps == [1.0, FIXED_POLL_SECONDS, FIXED_POLL_SECONDS]

    def test_event_driven_mode_uses_webdriverwait(self, mock_driver: MagicMock) -> None:
        """Test that EVENT_DRIVEN mode uses WebDriverWait without sleeping."""
        strategy = WaitStrategy(mode=WaitMode.EVENT_DRIVEN)
        elements = [MagicMock()]

        with patch("tockbot.providers.wait_helper.WebDriverWait") as mock_wait_class:
            mock_wait_class.return_value.until.return_value = elements
            with patch("tockbot.providers.wait_helper.time_module.sleep") as mock_sleep:
                result = strategy.wait_for_elements(mock_driver, LOCATOR, timeout=5.0)

        mock_wait_class.assert_called_once_with(mock_driver, 5.0)
        mock_sleep.assert_not_called()
        assert result == elements

    def test_event_driven_timeout_raises(self, mock_driver: MagicMock) -> None:
        """Test that a WebDriverWait timeout becomes ElementWaitTimeout."""
        strategy = WaitStrategy(mode=WaitMode.EVENT_DRIVEN)

        with patch("tockbot.providers.wait_helper.WebDriverWait") as mock_wait_class:
            mock_wait_class.return_value.until.side_effect = TimeoutException("timeout")
            with pytest.raises(ElementWaitTimeout) as exc_info:
                strategy.wait_for_elements(mock_driver, LOCATOR, timeout=10.0)

        assert exc_info.value.timeout_seconds == 10.0

    def test_hybrid_mode_adds_buffer_sleep(self, mock_driver: MagicMock) -> None:
        """Test that HYBRID mode adds buffer sleep after WebDriverWait."""
        strategy = WaitStrategy(mode=WaitMode.HYBRID)

        with patch("tockbot.providers.wait_helper.WebDriverWait") as mock_wait_class:
            mock_wait_class.return_value.until.return_value = [MagicMock()]
            with patch("tockbot.providers.wait_helper.time_module.sleep") as mock_sleep:
                strategy.wait_for_elements(mock_driver, LOCATOR, timeout=5.0)

        mock_sleep.assert_called_once_with(HYBRID_BUFFER_SECONDS)


class TestWaitStrategyWaitAfterAction:
    """Tests for WaitStrategy.wait_after_action method."""

    @pytest.mark.parametrize(
        ("mode", "expected"),
        [
            (WaitMode.FIXED, [1.5]),
            (WaitMode.HYBRID, [HYBRID_BUFFER_SECONDS]),
            (WaitMode.EVENT_DRIVEN, []),
        ],
    )
    def test_sleep_per_mode(self, mode: WaitMode, expected: list[float]) -> None:
        strategy = WaitStrategy(mode=mode)

        with patch("tockbot.providers.wait_helper.time_module.sleep") as mock_sleep:
            strategy.wait_after_action(fixed_duration=1.5)

        assert [call.args[0] for call in mock_sleep.call_args_list] == expected


class TestWaitStrategyWaitForStaleness:
    """Tests for WaitStrategy.wait_for_staleness method."""

    def test_fixed_mode_sleeps_only(self) -> None:
        strategy = WaitStrategy(mode=WaitMode.FIXED)

        with patch("tockbot.providers.wait_helper.WebDriverWait") as mock_wait_class:
            with patch("tockbot.providers.wait_helper.time_module.sleep") as mock_sleep:
                result = strategy.wait_for_staleness(
                    MagicMock(), MagicMock(), fixed_duration=1.0, timeout=5.0
                )

        assert result is False
        mock_sleep.assert_called_once_with(1.0)
        mock_wait_class.assert_not_called()

    def test_event_driven_mode_reports_stale(self) -> None:
        strategy = WaitStrategy(mode=WaitMode.EVENT_DRIVEN)
        driver = MagicMock()

        with patch("tockbot.providers.wait_helper.WebDriverWait") as mock_wait_class:
            mock_wait_class.return_value.until.return_value = True
            result = strategy.wait_for_staleness(
                driver, MagicMock(), fixed_duration=1.0, timeout=5.0
            )

        assert result is True
        mock_wait_class.assert_called_once_with(driver, 5.0)

    def test_timeout_returns_false(self) -> None:
        """Test that an element that never re-renders is not an error."""
        strategy = WaitStrategy(mode=WaitMode.EVENT_DRIVEN)

        with patch("tockbot.providers.wait_helper.WebDriverWait") as mock_wait_class:
            mock_wait_class.return_value.until.side_effect = TimeoutException("timeout")
            result = strategy.wait_for_staleness(
                MagicMock(), MagicMock(), fixed_duration=1.0, timeout=5.0
            )

        assert result is False
