"""Command line entry point: one booking run against Tock."""

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError
from selenium.common.exceptions import WebDriverException

from tockbot.config import Settings
from tockbot.exceptions import ConfigurationError, TockBotError
from tockbot.models.booking import RunOutcome
from tockbot.models.schemas import PatronCredentials, ReservationCriteria, RunStatus
from tockbot.providers.base import PageDriver
from tockbot.providers.notifier_base import Notifier
from tockbot.providers.selenium_driver import SeleniumPageDriver
from tockbot.providers.twilio_notifier import MockNotifier, TwilioNotifier
from tockbot.providers.wait_helper import get_wait_strategy
from tockbot.services.availability_scanner import AvailabilityScanner
from tockbot.services.booking_submitter import BookingSubmitter
from tockbot.services.orchestrator import AttemptOrchestrator
from tockbot.services.session_manager import SessionManager
from tockbot.services.slot_matcher import SlotMatcher

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_BOOKED = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tockbot",
        description="Book the first matching reservation on a Tock search page.",
    )
    parser.add_argument("--env-file", help="Read settings from this .env file instead of ./.env")
    parser.add_argument(
        "--dry-run",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Stop before the final purchase click (default from DRY_RUN)",
    )
    parser.add_argument("--retry-attempts", type=int, help="Retries after the first attempt")
    parser.add_argument("--retry-delay", type=int, help="Milliseconds to wait between attempts")
    parser.add_argument(
        "--headed", action="store_true", help="Show the browser window instead of running headless"
    )
    parser.add_argument("--log-level", help="Logging level (default from LOG_LEVEL)")
    return parser


def describe_errors(error: ValidationError) -> str:
    # Only field names and messages, never the submitted secret values
    return "; ".join(
        f"{'.'.join(str(part) for part in detail['loc'])}: {detail['msg']}"
        for detail in error.errors()
    )


def load_settings(args: argparse.Namespace) -> Settings:
    """Settings from the environment, with command line flags taking precedence."""
    try:
        base = Settings(_env_file=args.env_file) if args.env_file else Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {describe_errors(e)}") from e

    overrides: dict[str, object] = {}
    if args.dry_run is not None:
        overrides["dry_run"] = args.dry_run
    if args.retry_attempts is not None:
        overrides["retry_attempts"] = args.retry_attempts
    if args.retry_delay is not None:
        overrides["retry_delay_ms"] = args.retry_delay
    if args.headed:
        overrides["headless"] = False
    if args.log_level:
        overrides["log_level"] = args.log_level
    return base.model_copy(update=overrides)


def validate_run_inputs(config: Settings) -> tuple[ReservationCriteria, PatronCredentials]:
    """
    Build the validated reservation criteria and patron credentials.

    Raises:
        ConfigurationError: If any required value is missing or malformed.
    """
    try:
        criteria = ReservationCriteria.from_settings(config)
        credentials = PatronCredentials.from_settings(config)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {describe_errors(e)}") from e
    return criteria, credentials


def build_notifier(config: Settings) -> Notifier:
    if config.notify_phone_number:
        return TwilioNotifier(to_number=config.notify_phone_number, config=config)
    logger.info("NOTIFY_PHONE_NUMBER not set - results will only be logged")
    return MockNotifier()


async def run_booking(
    config: Settings,
    criteria: ReservationCriteria,
    credentials: PatronCredentials,
    driver: PageDriver,
) -> RunOutcome:
    """Wire the booking services onto driver and run one orchestration."""
    orchestrator = AttemptOrchestrator(
        driver=driver,
        criteria=criteria,
        session_manager=SessionManager(driver, credentials, config.login_timeout_ms),
        scanner=AvailabilityScanner(driver, config.calendar_timeout_ms),
        matcher=SlotMatcher(driver, criteria, config.slot_timeout_ms),
        submitter=BookingSubmitter(
            driver, credentials, config.payment_timeout_ms, config.confirmation_timeout_ms
        ),
        base_url=config.tock_base_url,
        close_consent_modal=config.close_consent_modal,
    )
    return await orchestrator.run()


async def execute(
    config: Settings,
    criteria: ReservationCriteria,
    credentials: PatronCredentials,
    notifier: Notifier,
    driver: PageDriver | None = None,
) -> int:
    """Run the booking, report the result, and return the process exit code."""
    driver = driver or SeleniumPageDriver(
        headless=config.headless, wait_strategy=get_wait_strategy(config.wait_mode)
    )
    try:
        async with driver:
            outcome = await run_booking(config, criteria, credentials, driver)
    except (TockBotError, WebDriverException) as e:
        logger.error(f"Booking run failed: {e}")
        await notifier.report_failure(str(e))
        return EXIT_NOT_BOOKED

    logger.info(f"Run finished after {outcome.attempts} attempt(s): {outcome.message}")
    await notifier.report_outcome(outcome)
    if outcome.status == RunStatus.EXHAUSTED:
        return EXIT_NOT_BOOKED
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_settings(args)
        logging.basicConfig(
            level=config.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        criteria, credentials = validate_run_inputs(config)
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
        logger.error(str(e))
        return EXIT_CONFIG_ERROR

    return asyncio.run(execute(config, criteria, credentials, build_notifier(config)))


if __name__ == "__main__":
    sys.exit(main())
