from dataclasses import dataclass
from datetime import datetime

from tockbot.models.schemas import RunStatus
from tockbot.providers.base import ElementHandle


@dataclass
class DayCandidate:
    label: str
    element: ElementHandle


@dataclass
class SlotCandidate:
    text: str
    element: ElementHandle


@dataclass
class SlotMatch:
    day: str
    time: str
    slot: SlotCandidate


@dataclass(frozen=True)
class SessionState:
    """Whether this run already signed in. Only ever moves from False to True."""

    authenticated: bool = False
    authenticated_at: datetime | None = None


@dataclass
class RunOutcome:
    status: RunStatus
    message: str
    attempts: int
    session: SessionState
    booking: SlotMatch | None = None

    @property
    def booked(self) -> bool:
        return self.status == RunStatus.BOOKED
