import logging
from collections.abc import Iterable

from tockbot.config import settings
from tockbot.models.booking import DayCandidate
from tockbot.models.schemas import ReservationCriteria
from tockbot.providers.base import ElementHandle, PageDriver
from tockbot.providers.tock_dom_schema import CALENDAR

logger = logging.getLogger(__name__)


def is_available_day(element: ElementHandle) -> bool:
    """A calendar day is bookable when it is enabled and flagged is-available."""
    return (
        element.attributes.get(CALENDAR.disabled_attribute) == "false"
        and CALENDAR.available_class in element.classes
    )


def filter_days(days: Iterable[DayCandidate], criteria: ReservationCriteria) -> list[DayCandidate]:
    """Apply the excluded/desired day filters, keeping calendar order."""
    return [
        day
        for day in days
        if day.label not in criteria.excluded_days
        and (not criteria.desired_days or day.label in criteria.desired_days)
    ]


class AvailabilityScanner:
    def __init__(self, driver: PageDriver, calendar_timeout_ms: int | None = None) -> None:
        self._driver = driver
        self._calendar_timeout_ms = (
            settings.calendar_timeout_ms if calendar_timeout_ms is None else calendar_timeout_ms
        )

    async def scan(self, criteria: ReservationCriteria) -> list[DayCandidate]:
        """
        List the calendar days worth searching for a time slot.

        An empty list means nothing is open right now and is not an error.

        Raises:
            ElementWaitTimeout: If the calendar never rendered.
        """
        logger.info("Checking for days with openings...")
        elements = await self._driver.wait_for(CALENDAR.day, self._calendar_timeout_ms)

        available = [
            DayCandidate(label=element.label, element=element)
            for element in elements
            if is_available_day(element)
        ]
        logger.info(f"Found {len(available)} available days out of {len(elements)} total days")

        matching = filter_days(available, criteria)
        logger.info(f"Found {len(matching)} matching days out of {len(available)} available days")
        return matching
