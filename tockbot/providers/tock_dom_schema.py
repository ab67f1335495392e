"""
Centralized DOM schema for the Tock (exploretock.com) consumer booking site.

All CSS selectors used by the booking flow are defined here as named constants,
grouped by functional area. Most Tock elements carry a stable ``data-testid``
attribute, which is preferred over class names wherever one exists.

This module is the single source of truth for DOM element identification.
When Tock changes its markup, update selectors ONLY in this file.
"""

from dataclasses import dataclass


def testid(value: str) -> str:
    """Build an attribute selector for a ``data-testid`` value."""
    return f"[data-testid={value}]"


@dataclass(frozen=True)
class ConsentSelectors:
    """TrustArc cookie consent banner shown to some regions."""

    accept_button: str = "#truste-consent-required"


@dataclass(frozen=True)
class LoginSelectors:
    """Selectors for the /login form."""

    email_input: str = testid("email-input")
    password_input: str = testid("password-input")
    submit_button: str = testid("signin")
    # The booking calendar only renders once the login redirect has completed
    post_login_marker: str = testid("consumer-calendar-day")


@dataclass(frozen=True)
class CalendarSelectors:
    """Selectors for the day picker on the search page."""

    day: str = testid("consumer-calendar-day")
    # Day attributes used to decide availability
    disabled_attribute: str = "aria-disabled"
    available_class: str = "is-available"


@dataclass(frozen=True)
class SearchResultSelectors:
    """Selectors for the time slots listed under a selected day."""

    time_slot: str = f"{testid('search-result-time')} span"


@dataclass(frozen=True)
class CheckoutSelectors:
    """Selectors for the checkout form, Braintree card widget and receipt."""

    content_container: str = ".Consumer-contentContainer"
    # Only present when the reservation requires a card on file
    cvv_marker: str = ".Consumer-contentContainer span#cvv"
    cvv_frame: str = "iframe[type=cvv]"
    cvv_input: str = "#cvv"
    purchase_button: str = testid("purchase-button")
    confirmation_id: str = testid("receipt-confirmation-id")


CONSENT = ConsentSelectors()
LOGIN = LoginSelectors()
CALENDAR = CalendarSelectors()
SEARCH_RESULTS = SearchResultSelectors()
CHECKOUT = CheckoutSelectors()
