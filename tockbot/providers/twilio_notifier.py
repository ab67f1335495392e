import asyncio
import logging

from twilio.rest import Client

from tockbot.config import Settings, settings
from tockbot.providers.notifier_base import NotificationResult, Notifier

logger = logging.getLogger(__name__)


class TwilioNotifier(Notifier):
    """Twilio implementation of the notifier interface.

    Supports both SMS and WhatsApp channels via the twilio_channel setting.
    WhatsApp uses the same Twilio Messages API but with 'whatsapp:' prefix on phone numbers.
    """

    def __init__(self, to_number: str | None = None, config: Settings | None = None) -> None:
        self.config = config or settings
        self.to_number = to_number or self.config.notify_phone_number
        self._client: Client | None = None

    @property
    def client(self) -> Client:
        """Lazily initialize and return the Twilio client."""
        if self._client is None:
            self._client = Client(self.config.twilio_account_sid, self.config.twilio_auth_token)
        return self._client

    @property
    def is_whatsapp(self) -> bool:
        """Check if WhatsApp channel is configured."""
        return self.config.twilio_channel.lower() == "whatsapp"

    def _format_phone_for_channel(self, phone_number: str) -> str:
        """
        Format a phone number for the configured channel.

        For WhatsApp, adds 'whatsapp:' prefix if not already present.
        For SMS, returns the number as-is (E.164 format).
        """
        if self.is_whatsapp and not phone_number.startswith("whatsapp:"):
            return f"whatsapp:{phone_number}"
        return phone_number

    async def send(self, message: str) -> NotificationResult:
        """
        Send a message via Twilio (SMS or WhatsApp based on channel setting).

        Without Twilio credentials the message is only logged, which keeps local
        and dry runs quiet.
        """
        channel = "WhatsApp" if self.is_whatsapp else "SMS"
        if not self.config.twilio_account_sid or not self.config.twilio_auth_token:
            logger.info(f"[{channel} Mock] To: {self.to_number}, Message: {message}")
            return NotificationResult(success=True, message_sid="mock_sid")

        try:
            result = await asyncio.to_thread(
                self.client.messages.create,
                body=message,
                from_=self._format_phone_for_channel(self.config.twilio_phone_number),
                to=self._format_phone_for_channel(self.to_number),
            )
            logger.info(f"{channel} notification sent: {result.sid}")
            return NotificationResult(success=True, message_sid=result.sid)
        except Exception as e:
            # Includes connection errors raised by the HTTP client
            logger.error(f"Error sending {channel}: {e}")
            return NotificationResult(success=False, error_message=str(e))


class MockNotifier(Notifier):
    """Mock notifier for testing and runs without a recipient."""

    def __init__(self) -> None:
        self.sent_messages: list[str] = []

    async def send(self, message: str) -> NotificationResult:
        """Record the message and return a mock success result."""
        self.sent_messages.append(message)
        logger.info(f"[Notify Mock] {message}")
        return NotificationResult(success=True, message_sid=f"mock_sid_{len(self.sent_messages)}")
