"""Exception hierarchy for the Tock booking bot."""


class TockBotError(Exception):
    """Base exception."""


class ConfigurationError(TockBotError):
    """Configuration is missing or invalid; the run never starts."""


class ElementWaitTimeout(TockBotError):
    """A bounded wait for a page element expired."""

    def __init__(self, selector: str, timeout_seconds: float) -> None:
        self.selector = selector
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Timed out after {timeout_seconds:.1f}s waiting for {selector}")


class AuthenticationError(TockBotError):
    """Sign-in did not reach the post-login page."""


class PaymentWidgetTimeout(TockBotError):
    """The card verification widget never became ready."""


class BookingSubmissionError(TockBotError):
    """The purchase was submitted but no confirmation appeared."""
