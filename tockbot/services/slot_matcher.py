import logging
from collections.abc import Collection, Sequence

from tockbot.config import settings
from tockbot.exceptions import ElementWaitTimeout
from tockbot.models.booking import DayCandidate, SlotCandidate, SlotMatch
from tockbot.models.schemas import ReservationCriteria
from tockbot.providers.base import PageDriver
from tockbot.providers.tock_dom_schema import SEARCH_RESULTS

logger = logging.getLogger(__name__)


def pick_slot(slots: Sequence[SlotCandidate], desired: Collection[str]) -> SlotCandidate | None:
    """First slot in display order whose text is desired, or the first slot if nothing is."""
    for slot in slots:
        if not desired or slot.text in desired:
            return slot
    return None


class SlotMatcher:
    """
    First-fit search for a time slot across candidate days.

    Days are tried strictly in the order given and the search stops at the first
    day with an acceptable slot. Earlier days are never revisited.
    """

    def __init__(
        self,
        driver: PageDriver,
        criteria: ReservationCriteria,
        slot_timeout_ms: int | None = None,
    ) -> None:
        self._driver = driver
        self._desired_time_slots = frozenset(criteria.desired_time_slots)
        self._slot_timeout_ms = (
            settings.slot_timeout_ms if slot_timeout_ms is None else slot_timeout_ms
        )

    async def find_slot(self, days: Sequence[DayCandidate]) -> SlotMatch | None:
        if not days:
            logger.info("No days available to check for time slots")
            return None

        previous: list[SlotCandidate] = []
        for day in days:
            slots = await self._read_slots(day, previous)
            previous = slots
            logger.info(f"Found {len(slots)} slots on {day.label}")

            slot = pick_slot(slots, self._desired_time_slots)
            if slot is not None:
                logger.info(f"Found time slot for {day.label} @ {slot.text}")
                return SlotMatch(day=day.label, time=slot.text, slot=slot)

        logger.info("No matching time slots found on any available day")
        return None

    async def _read_slots(
        self, day: DayCandidate, previous: list[SlotCandidate]
    ) -> list[SlotCandidate]:
        """Select the day and read its time slots in display order."""
        await self._driver.click(day.element)
        if previous:
            # The last day's slots stay in the DOM until the list re-renders
            await self._driver.wait_until_stale(previous[0].element, self._slot_timeout_ms)
        try:
            elements = await self._driver.wait_for(SEARCH_RESULTS.time_slot, self._slot_timeout_ms)
        except ElementWaitTimeout:
            # A day with no openings renders no slot elements at all
            return []
        return [SlotCandidate(text=element.text, element=element) for element in elements]
