from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ElementHandle:
    """A snapshot of a page element plus an opaque reference the driver can act on."""

    label: str = ""
    text: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    ref: Any = field(default=None, compare=False, repr=False)
    frame: str | None = None

    @property
    def classes(self) -> list[str]:
        return self.attributes.get("class", "").split()


class PageDriver(ABC):
    """Abstract base class for the browser capability the booking flow runs on."""

    async def __aenter__(self) -> "PageDriver":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Load the given URL in the current tab."""
        pass

    @abstractmethod
    async def query_elements(self, selector: str, frame: str | None = None) -> list[ElementHandle]:
        """Return the elements currently matching selector, without waiting."""
        pass

    @abstractmethod
    async def click(self, element: ElementHandle) -> None:
        pass

    @abstractmethod
    async def type_text(self, element: ElementHandle, text: str) -> None:
        pass

    @abstractmethod
    async def wait_for(
        self, selector: str, timeout_ms: int, frame: str | None = None
    ) -> list[ElementHandle]:
        """
        Wait until at least one element matches selector.

        Args:
            selector: CSS selector to wait for.
            timeout_ms: Upper bound on the wait.
            frame: Optional CSS selector of an iframe the element lives in.

        Returns:
            The matching elements, in document order.

        Raises:
            ElementWaitTimeout: If nothing matched within timeout_ms.
        """
        pass

    @abstractmethod
    async def wait_until_stale(self, element: ElementHandle, timeout_ms: int) -> bool:
        """
        Wait until element has been removed from the page by a re-render.

        Returns:
            True if the element went stale within timeout_ms, False otherwise.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        pass
