from typing import Any

from tockbot.models.schemas import PatronCredentials, ReservationCriteria


def make_criteria(**overrides: Any) -> ReservationCriteria:
    values: dict[str, Any] = {
        "booking_page": "/sushi-den/search",
        "party_size": 2,
        "desired_time_slots": (),
        "excluded_days": (),
        "desired_days": (),
        "dry_run": False,
        "max_retry_attempts": 2,
        "retry_delay_ms": 10000,
    }
    values.update(overrides)
    return ReservationCriteria(**values)


def make_credentials(**overrides: Any) -> PatronCredentials:
    values: dict[str, Any] = {
        "email": "patron@example.com",
        "password": "hunter2",
        "cvv": "123",
    }
    values.update(overrides)
    return PatronCredentials(**values)
