"""
Tests for BookingSubmitter in tockbot/services/booking_submitter.py.

These tests verify the payment step, dry run short-circuit and the
confirmation handling of the checkout flow.
"""

import pytest

from tests.fixtures.factories import make_credentials, make_criteria
from tests.fixtures.fake_driver import FakePageDriver, make_element, make_slot
from tockbot.exceptions import BookingSubmissionError, PaymentWidgetTimeout
from tockbot.models.booking import SlotCandidate
from tockbot.providers.tock_dom_schema import CHECKOUT
from tockbot.services.booking_submitter import DRY_RUN_MESSAGE, BookingSubmitter


@pytest.fixture
def slot() -> SlotCandidate:
    return SlotCandidate(text="7:00 PM", element=make_slot("7:00 PM"))


@pytest.fixture
def driver() -> FakePageDriver:
    """A free checkout page whose purchase button shows a receipt."""
    fake = FakePageDriver(
        {
            CHECKOUT.content_container: [make_element("checkout")],
            CHECKOUT.purchase_button: [make_element("purchase")],
        }
    )
    fake.on_click["purchase"] = lambda d: d.elements.update(
        {CHECKOUT.confirmation_id: [make_element("receipt", text="TCK-42")]}
    )
    return fake


@pytest.fixture
def submitter(driver: FakePageDriver) -> BookingSubmitter:
    return BookingSubmitter(
        driver, make_credentials(cvv="987"), payment_timeout_ms=10000, confirmation_timeout_ms=10000
    )


def add_card_widget(driver: FakePageDriver) -> None:
    driver.elements[CHECKOUT.cvv_marker] = [make_element("cvv-marker")]
    driver.elements[CHECKOUT.cvv_input] = [make_element("cvv-input")]


class TestBookingSubmitterSubmit:
    """Tests for BookingSubmitter.submit."""

    @pytest.mark.asyncio
    async def test_free_reservation_is_booked(
        self, submitter: BookingSubmitter, driver: FakePageDriver, slot: SlotCandidate
    ) -> None:
        """Test that a reservation without deposit skips the card step."""
        message = await submitter.submit(slot, make_criteria(dry_run=False))

        assert message == "booked! TCK-42"
        assert driver.calls_named("type_text") == []
        assert driver.calls_named("click") == [("click", "slot:7:00 PM"), ("click", "purchase")]

    @pytest.mark.asyncio
    async def test_deposit_reservation_enters_cvv(
        self, submitter: BookingSubmitter, driver: FakePageDriver, slot: SlotCandidate
    ) -> None:
        """Test that the CVV is typed into the card widget frame."""
        add_card_widget(driver)

        message = await submitter.submit(slot, make_criteria(dry_run=False))

        assert message == "booked! TCK-42"
        assert ("wait_for", CHECKOUT.cvv_input, 10000, CHECKOUT.cvv_frame) in driver.calls
        assert driver.calls_named("type_text") == [("type_text", "cvv-input", "987")]

    @pytest.mark.asyncio
    async def test_dry_run_never_purchases(
        self, submitter: BookingSubmitter, driver: FakePageDriver
    ) -> None:
        """Test that dry run returns the fixed notice and never clicks purchase."""
        add_card_widget(driver)
        slot = SlotCandidate(text="19:00", element=make_slot("19:00"))

        message = await submitter.submit(slot, make_criteria(dry_run=True))

        assert message == DRY_RUN_MESSAGE
        assert message == "not booked, dry run mode enabled..."
        assert ("click", "purchase") not in driver.calls
        assert ("wait_for", CHECKOUT.purchase_button, 10000, None) not in driver.calls

    @pytest.mark.asyncio
    async def test_missing_card_widget_is_fatal(
        self, submitter: BookingSubmitter, driver: FakePageDriver, slot: SlotCandidate
    ) -> None:
        """Test that a CVV marker without a ready widget raises PaymentWidgetTimeout."""
        driver.elements[CHECKOUT.cvv_marker] = [make_element("cvv-marker")]

        with pytest.raises(PaymentWidgetTimeout):
            await submitter.submit(slot, make_criteria(dry_run=False))

    @pytest.mark.asyncio
    async def test_missing_confirmation_is_fatal(
        self, submitter: BookingSubmitter, driver: FakePageDriver, slot: SlotCandidate
    ) -> None:
        """Test that no receipt after purchase raises BookingSubmissionError."""
        driver.on_click.clear()

        with pytest.raises(BookingSubmissionError):
            await submitter.submit(slot, make_criteria(dry_run=False))
