import logging

from tockbot.config import settings
from tockbot.exceptions import BookingSubmissionError, ElementWaitTimeout, PaymentWidgetTimeout
from tockbot.models.booking import SlotCandidate
from tockbot.models.schemas import PatronCredentials, ReservationCriteria
from tockbot.providers.base import PageDriver
from tockbot.providers.tock_dom_schema import CHECKOUT

logger = logging.getLogger(__name__)

DRY_RUN_MESSAGE = "not booked, dry run mode enabled..."


class BookingSubmitter:
    """Completes the checkout form for a chosen slot and places the booking."""

    def __init__(
        self,
        driver: PageDriver,
        credentials: PatronCredentials,
        payment_timeout_ms: int | None = None,
        confirmation_timeout_ms: int | None = None,
    ) -> None:
        self._driver = driver
        self._credentials = credentials
        self._payment_timeout_ms = (
            settings.payment_timeout_ms if payment_timeout_ms is None else payment_timeout_ms
        )
        self._confirmation_timeout_ms = (
            settings.confirmation_timeout_ms
            if confirmation_timeout_ms is None
            else confirmation_timeout_ms
        )

    async def submit(self, slot: SlotCandidate, criteria: ReservationCriteria) -> str:
        """
        Book the slot and return a human-readable confirmation.

        Args:
            slot: The time slot picked by the matcher.
            criteria: The run's reservation criteria (only dry_run is read).

        Returns:
            "booked! <confirmation id>", or the dry run notice when dry_run is set.

        Raises:
            ElementWaitTimeout: If the checkout form or purchase button never appeared.
            PaymentWidgetTimeout: If the card verification field never became ready.
            BookingSubmissionError: If no confirmation id appeared after purchase.
        """
        await self._driver.click(slot.element)
        await self._complete_payment()

        logger.info("Booking reservation...")
        if criteria.dry_run:
            return DRY_RUN_MESSAGE

        purchase = await self._driver.wait_for(
            CHECKOUT.purchase_button, self._confirmation_timeout_ms
        )
        await self._driver.click(purchase[0])
        try:
            receipt = await self._driver.wait_for(
                CHECKOUT.confirmation_id, self._confirmation_timeout_ms
            )
        except ElementWaitTimeout as e:
            raise BookingSubmissionError(f"No booking confirmation shown: {e}") from e
        return f"booked! {receipt[0].text}"

    async def _complete_payment(self) -> bool:
        """Enter the CVV when the checkout asks for one. Returns whether it did."""
        await self._driver.wait_for(CHECKOUT.content_container, self._payment_timeout_ms)
        if not await self._driver.query_elements(CHECKOUT.cvv_marker):
            logger.info("No deposit required")
            return False

        logger.info("Completing payment form...")
        try:
            cvv_input = (
                await self._driver.wait_for(
                    CHECKOUT.cvv_input, self._payment_timeout_ms, frame=CHECKOUT.cvv_frame
                )
            )[0]
        except ElementWaitTimeout as e:
            raise PaymentWidgetTimeout(f"Card verification field never became ready: {e}") from e
        await self._driver.type_text(cvv_input, self._credentials.cvv.get_secret_value())
        return True
