"""
Attempt orchestration for a single booking run.

Each attempt walks the same states:

    start -> authenticating -> scanning -> matching -> submitting -> success

An empty scan or a slot miss moves to the retrying decision, which either waits
and starts the next attempt (reusing the signed-in session) or ends the run as
exhausted. Timeouts waiting for page elements are not retried; they propagate to
the caller and end the run.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from urllib.parse import urlencode, urljoin

from tockbot.config import settings
from tockbot.exceptions import ElementWaitTimeout
from tockbot.models.booking import RunOutcome, SessionState
from tockbot.models.schemas import AttemptState, ReservationCriteria, RunStatus
from tockbot.providers.base import PageDriver
from tockbot.providers.tock_dom_schema import CONSENT
from tockbot.services.availability_scanner import AvailabilityScanner
from tockbot.services.booking_submitter import BookingSubmitter
from tockbot.services.session_manager import SessionManager
from tockbot.services.slot_matcher import SlotMatcher

logger = logging.getLogger(__name__)

NO_AVAILABILITY_MESSAGE = "no availability after retries"
NO_MATCHING_SLOTS_MESSAGE = "no matching slots after retries"

CONSENT_TIMEOUT_MS = 5000


def booking_path(criteria: ReservationCriteria) -> str:
    """Search page path with party size, plus the first desired day as a date hint."""
    params: dict[str, str | int] = {"size": criteria.party_size}
    if criteria.desired_days:
        params["date"] = criteria.desired_days[0]
    return f"{criteria.booking_page}?{urlencode(params)}"


def booking_url(base_url: str, criteria: ReservationCriteria, authenticated: bool) -> str:
    """
    URL to open at the start of an attempt.

    Before sign-in this is the login page with the search page as its redirect
    target; afterwards it is the search page itself.
    """
    path = booking_path(criteria)
    if authenticated:
        return urljoin(base_url, path)
    return f"{urljoin(base_url, '/login')}?{urlencode({'continue': path})}"


class AttemptOrchestrator:
    """
    Runs booking attempts until one succeeds or the retry budget is spent.

    Attributes:
        state: The state the current attempt is in, for logging and inspection.
    """

    def __init__(
        self,
        driver: PageDriver,
        criteria: ReservationCriteria,
        session_manager: SessionManager,
        scanner: AvailabilityScanner,
        matcher: SlotMatcher,
        submitter: BookingSubmitter,
        base_url: str | None = None,
        close_consent_modal: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._driver = driver
        self._criteria = criteria
        self._session_manager = session_manager
        self._scanner = scanner
        self._matcher = matcher
        self._submitter = submitter
        self._base_url = base_url or settings.tock_base_url
        self._close_consent_modal = close_consent_modal
        self._sleep = sleep
        self.state = AttemptState.START

    def _transition(self, state: AttemptState) -> None:
        logger.debug(f"Attempt state {self.state.value} -> {state.value}")
        self.state = state

    async def run(self, session: SessionState | None = None) -> RunOutcome:
        """
        Run attempts until a booking is made or retries are exhausted.

        Args:
            session: Session state from earlier in this run, if any.

        Returns:
            RunOutcome describing the booking, the dry run, or the exhaustion.

        Raises:
            TockBotError: Any timeout waiting for the page ends the run.
        """
        session = session or SessionState()
        total_attempts = self._criteria.max_retry_attempts + 1
        attempt = 1
        self._transition(AttemptState.START)

        while True:
            logger.info(f"Attempt {attempt} of {total_attempts}")
            await self._visit(session)

            self._transition(AttemptState.AUTHENTICATING)
            session = await self._session_manager.ensure_authenticated(session)

            self._transition(AttemptState.SCANNING)
            days = await self._scanner.scan(self._criteria)
            if not days:
                logger.info("No available days found")
                miss_message = NO_AVAILABILITY_MESSAGE
            else:
                logger.info(f"Found {len(days)} days available for booking")
                self._transition(AttemptState.MATCHING)
                match = await self._matcher.find_slot(days)
                if match is not None:
                    self._transition(AttemptState.SUBMITTING)
                    message = await self._submitter.submit(match.slot, self._criteria)
                    self._transition(AttemptState.SUCCESS)
                    status = RunStatus.DRY_RUN if self._criteria.dry_run else RunStatus.BOOKED
                    return RunOutcome(
                        status=status,
                        message=message,
                        attempts=attempt,
                        session=session,
                        booking=match,
                    )
                logger.info("No matching time slots found")
                miss_message = NO_MATCHING_SLOTS_MESSAGE

            self._transition(AttemptState.RETRYING)
            if attempt > self._criteria.max_retry_attempts:
                self._transition(AttemptState.EXHAUSTED)
                logger.warning(f"Max retry attempts reached: {miss_message}")
                return RunOutcome(
                    status=RunStatus.EXHAUSTED,
                    message=miss_message,
                    attempts=attempt,
                    session=session,
                )

            logger.info(
                f"Waiting {self._criteria.retry_delay_ms}ms before retry (keeping auth session)..."
            )
            await self._sleep(self._criteria.retry_delay_ms / 1000)
            attempt += 1

    async def _visit(self, session: SessionState) -> None:
        """Open the booking page fresh, since availability may have changed."""
        if session.authenticated:
            logger.info("Already authenticated, going directly to booking page")
        await self._driver.navigate(
            booking_url(self._base_url, self._criteria, session.authenticated)
        )
        if self._close_consent_modal:
            await self._dismiss_consent_modal()

    async def _dismiss_consent_modal(self) -> None:
        logger.info("Closing consent modal...")
        try:
            buttons = await self._driver.wait_for(CONSENT.accept_button, CONSENT_TIMEOUT_MS)
        except ElementWaitTimeout:
            logger.info("Consent modal not shown")
            return
        await self._driver.click(buttons[0])
