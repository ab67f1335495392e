from abc import ABC, abstractmethod
from dataclasses import dataclass

from tockbot.models.booking import RunOutcome
from tockbot.models.schemas import RunStatus


@dataclass
class NotificationResult:
    success: bool
    message_sid: str | None = None
    error_message: str | None = None


class Notifier(ABC):
    """Abstract base class for delivering the final booking result."""

    @abstractmethod
    async def send(self, message: str) -> NotificationResult:
        """
        Deliver a message to the configured recipient.

        Args:
            message: The message content.

        Returns:
            NotificationResult with success status and message SID or error.
        """
        pass

    async def report_outcome(self, outcome: RunOutcome) -> NotificationResult:
        """Send the result of a completed run."""
        if outcome.status == RunStatus.EXHAUSTED:
            return await self.report_failure(outcome.message)
        message = f"Tock reservation: {outcome.message}"
        if outcome.booking is not None:
            message += f" ({outcome.booking.day} @ {outcome.booking.time})"
        return await self.send(message)

    async def report_failure(self, reason: str) -> NotificationResult:
        """Send a notice that the run ended without a reservation."""
        return await self.send(f"No reservation booked: {reason}")
