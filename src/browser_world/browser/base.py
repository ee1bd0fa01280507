"""Browser session abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional


class BrowserActionError(RuntimeError):
    """Raised when a call against the browser session fails."""


class BrowserSession(ABC):
    """Interface for one live browser-control connection.

    ``close`` shuts the browser window/context and ``quit`` releases the rest
    of the driver. Sessions whose ``close`` already releases everything set
    ``releases_on_close`` and are never asked to ``quit``.
    """

    identifier: str = ""
    releases_on_close: bool = False
    maximized: bool = False
    ignore_https_errors: bool = False

    @property
    @abstractmethod
    def is_live(self) -> bool:
        """Return whether the session can still accept commands."""

    @property
    @abstractmethod
    def page(self) -> Any:
        """Return the page that steps currently interact with."""

    @abstractmethod
    def close(self) -> None:
        """Close the browser window or context."""

    @abstractmethod
    def quit(self) -> None:
        """Terminate the browser and its driver."""

    @abstractmethod
    def screenshot(self) -> bytes:
        """Capture the current page as PNG bytes."""

    @abstractmethod
    def clear_cookies(self) -> None:
        """Delete every cookie of the browser context."""

    @abstractmethod
    def clear_storages(self) -> None:
        """Empty local and session storage of the current page."""

    @abstractmethod
    def get_attribute(self, selector: str, name: str) -> Optional[str]:
        """Return an attribute of the first element matching ``selector``.

        Raises :class:`~browser_world.errors.ElementNotFoundError` when the
        selector matches nothing.
        """

    @abstractmethod
    def window_handles(self) -> list[Any]:
        """Return every open top-level window of the session."""

    @abstractmethod
    def evaluate(self, script: str, arg: Any = None) -> Any:
        """Run ``script`` in the current page and return its result."""
