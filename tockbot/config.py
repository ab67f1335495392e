import logging
from enum import Enum

from pydantic import ValidationError
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class WaitMode(str, Enum):
    FIXED = "fixed"
    EVENT_DRIVEN = "event_driven"
    HYBRID = "hybrid"


class Settings(BaseSettings):
    tock_base_url: str = "https://www.exploretock.com"

    booking_page: str = ""
    party_size: int = 2
    desired_time_slots: list[str] = []
    excluded_days: list[str] = []
    desired_days: list[str] = []
    dry_run: bool = True
    retry_attempts: int = 5
    retry_delay_ms: int = 10000

    patron_email: str = ""
    patron_password: str = ""
    patron_cvv: str = ""

    close_consent_modal: bool = False
    headless: bool = True
    wait_mode: WaitMode = WaitMode.EVENT_DRIVEN

    login_timeout_ms: int = 10000
    calendar_timeout_ms: int = 5000
    slot_timeout_ms: int = 5000
    payment_timeout_ms: int = 10000
    confirmation_timeout_ms: int = 10000

    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_phone_number: str = ""
    twilio_channel: str = "sms"
    notify_phone_number: str = ""

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


def load_environment_settings() -> Settings:
    """
    Settings for module-level defaults.

    Malformed environment values must not break imports. The CLI builds its own
    Settings and reports the same values as a configuration error.
    """
    try:
        return Settings()
    except ValidationError as e:
        logger.warning(f"Ignoring invalid environment settings ({e.error_count()} errors)")
        return Settings.model_construct()


settings = load_environment_settings()
