import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from tockbot.config import Settings

CVV_PATTERN = re.compile(r"^[0-9]{3,4}$")


class AttemptState(str, Enum):
    START = "start"
    AUTHENTICATING = "authenticating"
    SCANNING = "scanning"
    MATCHING = "matching"
    SUBMITTING = "submitting"
    RETRYING = "retrying"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"


class RunStatus(str, Enum):
    BOOKED = "booked"
    DRY_RUN = "dry_run"
    EXHAUSTED = "exhausted"


class ReservationCriteria(BaseModel):
    """What to book and how hard to try. Fixed for the lifetime of one run."""

    model_config = ConfigDict(frozen=True)

    booking_page: str = Field(..., min_length=1, description="Tock search page path or URL")
    party_size: int = Field(..., gt=0, strict=True, description="Number of guests")
    desired_time_slots: tuple[str, ...] = Field(
        default=(), description="Acceptable slot labels, empty accepts any slot"
    )
    excluded_days: tuple[str, ...] = Field(default=(), description="Day labels never booked")
    desired_days: tuple[str, ...] = Field(
        default=(), description="Only these day labels are considered, empty accepts any day"
    )
    dry_run: bool = Field(..., strict=True, description="Skip the final purchase click")
    max_retry_attempts: int = Field(default=5, ge=0, strict=True)
    retry_delay_ms: int = Field(default=10000, ge=0, strict=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReservationCriteria":
        return cls(
            booking_page=settings.booking_page,
            party_size=settings.party_size,
            desired_time_slots=tuple(settings.desired_time_slots),
            excluded_days=tuple(settings.excluded_days),
            desired_days=tuple(settings.desired_days),
            dry_run=settings.dry_run,
            max_retry_attempts=settings.retry_attempts,
            retry_delay_ms=settings.retry_delay_ms,
        )


class PatronCredentials(BaseModel):
    """Tock account credentials. Secret values are masked in repr and logs."""

    model_config = ConfigDict(frozen=True)

    email: str = Field(..., min_length=1)
    password: SecretStr
    cvv: SecretStr

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("password must not be empty")
        return value

    @field_validator("cvv")
    @classmethod
    def cvv_is_three_or_four_digits(cls, value: SecretStr) -> SecretStr:
        if not CVV_PATTERN.match(value.get_secret_value()):
            raise ValueError("cvv must be 3 or 4 digits")
        return value

    @classmethod
    def from_settings(cls, settings: Settings) -> "PatronCredentials":
        return cls(
            email=settings.patron_email,
            password=settings.patron_password,
            cvv=settings.patron_cvv,
        )
