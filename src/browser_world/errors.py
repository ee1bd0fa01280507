"""Exceptions raised by the browser world harness."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class BrowserWorldError(RuntimeError):
    """Base class for harness errors."""


class UnknownDriverError(BrowserWorldError):
    """Raised when a browser identifier matches no provider and no file."""

    def __init__(self, identifier: str, path: Optional[Path] = None) -> None:
        self.identifier = identifier
        self.path = path
        detail = f"Could not find driver file: {path}" if path else "no such provider"
        super().__init__(f"Unknown browser '{identifier}': {detail}")


class DriverLoadError(BrowserWorldError):
    """Raised when a provider or custom driver module cannot produce a session."""

    def __init__(self, path: Union[Path, str], reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load driver from {path}: {reason}")


class WaitTimeoutError(BrowserWorldError, TimeoutError):
    """Raised when a polled condition does not hold before its timeout."""

    def __init__(self, message: str, timeout: int, elapsed: float) -> None:
        self.message = message
        self.timeout = timeout
        self.elapsed = elapsed
        super().__init__(message)


class TeardownError(BrowserWorldError):
    """Raised when closing or quitting the browser session fails."""


class ReportGenerationError(BrowserWorldError):
    """Raised when end-of-run reports cannot be produced."""


class SessionNotActiveError(BrowserWorldError):
    """Raised when a step needs a browser session but none is live."""


class ElementNotFoundError(BrowserWorldError):
    """Raised when a selector matches nothing on the current page."""

    def __init__(self, selector: str) -> None:
        self.selector = selector
        super().__init__(f"No element matches selector: {selector}")
