import logging
from datetime import UTC, datetime

from tockbot.config import settings
from tockbot.exceptions import AuthenticationError, ElementWaitTimeout
from tockbot.models.booking import SessionState
from tockbot.models.schemas import PatronCredentials
from tockbot.providers.base import ElementHandle, PageDriver
from tockbot.providers.tock_dom_schema import LOGIN

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Signs the patron in once per run.

    The orchestrator navigates to the Tock login page (with the booking page as
    the redirect target) before calling ensure_authenticated, so this class only
    fills the form and waits for the booking calendar to show up.
    """

    def __init__(
        self,
        driver: PageDriver,
        credentials: PatronCredentials,
        login_timeout_ms: int | None = None,
    ) -> None:
        self._driver = driver
        self._credentials = credentials
        self._login_timeout_ms = (
            settings.login_timeout_ms if login_timeout_ms is None else login_timeout_ms
        )

    async def ensure_authenticated(self, state: SessionState) -> SessionState:
        """
        Return an authenticated session state, signing in only if needed.

        Args:
            state: The session state carried by the current run.

        Returns:
            The same state if already authenticated, otherwise a new authenticated state.

        Raises:
            AuthenticationError: If the post-login page did not appear in time.
        """
        if state.authenticated:
            logger.info("Already authenticated, skipping login")
            return state

        try:
            email_input = await self._first(LOGIN.email_input)
            await self._driver.type_text(email_input, self._credentials.email)

            password_input = await self._first(LOGIN.password_input)
            await self._driver.type_text(
                password_input, self._credentials.password.get_secret_value()
            )

            logger.info("Logging in...")
            await self._driver.click(await self._first(LOGIN.submit_button))

            await self._driver.wait_for(LOGIN.post_login_marker, self._login_timeout_ms)
        except ElementWaitTimeout as e:
            logger.error(f"Login did not complete: {e}")
            raise AuthenticationError(f"Login did not complete: {e}") from e

        logger.info("Authentication successful, session will be reused for retries")
        return SessionState(authenticated=True, authenticated_at=datetime.now(UTC))

    async def _first(self, selector: str) -> ElementHandle:
        return (await self._driver.wait_for(selector, self._login_timeout_ms))[0]
