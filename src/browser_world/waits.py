"""Bounded-time polling of browser conditions.

Every wait is described by a :class:`WaitDescriptor` (predicate, timeout,
failure message) and run by :class:`WaitEngine`, which polls the predicate
against the current session until it returns a truthy value or the timeout
elapses. Timeouts are in milliseconds.

The module-level functions build predicates; they are what steps see as
``context.until``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .browser.base import BrowserSession
from .errors import ElementNotFoundError, WaitTimeoutError

LOGGER = logging.getLogger(__name__)

Predicate = Callable[[BrowserSession], Any]

WINDOW_POLL_INTERVAL = 1000


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def attribute_equals(selector: str, attribute: str, value: str) -> Predicate:
    def predicate(session: BrowserSession) -> bool:
        return session.get_attribute(selector, attribute) == value

    return predicate


def attribute_exists(selector: str, attribute: str) -> Predicate:
    def predicate(session: BrowserSession) -> bool:
        return session.get_attribute(selector, attribute) is not None

    return predicate


def attribute_absent(selector: str, attribute: str) -> Predicate:
    def predicate(session: BrowserSession) -> bool:
        return session.get_attribute(selector, attribute) is None

    return predicate


def element_located(selector: str) -> Predicate:
    """Match the first element for a CSS selector, or XPath when it starts with ``//``."""

    query = f"xpath={selector}" if selector.startswith("//") else selector

    def predicate(session: BrowserSession) -> Any:
        return session.page.query_selector(query)

    return predicate


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WaitDescriptor:
    """Predicate, timeout (ms) and failure message of one wait."""

    predicate: Predicate
    timeout: int
    message: str

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError(f"Wait timeout must be positive, got {self.timeout}")


class WaitEngine:
    """Poll predicates against the live session with a bounded timeout."""

    def __init__(
        self,
        session_provider: Callable[[], BrowserSession],
        *,
        default_timeout: int = 10_000,
        poll_interval: int = 100,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if default_timeout <= 0:
            raise ValueError("default_timeout must be positive")
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self._session_provider = session_provider
        self.default_timeout = default_timeout
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep

    def describe(
        self,
        predicate: Predicate,
        timeout: Optional[int] = None,
        message: Optional[str] = None,
    ) -> WaitDescriptor:
        timeout = timeout or self.default_timeout
        return WaitDescriptor(
            predicate=predicate,
            timeout=timeout,
            message=message or f"Condition not met after {timeout} milliseconds",
        )

    def wait_until(
        self,
        predicate: Predicate,
        timeout: Optional[int] = None,
        message: Optional[str] = None,
        *,
        ignored_exceptions: tuple[type[BaseException], ...] = (),
    ) -> Any:
        """Return the first truthy value of ``predicate``.

        Raises :class:`WaitTimeoutError` with ``message`` once ``timeout``
        milliseconds have passed. Exceptions in ``ignored_exceptions`` count as
        an unsuccessful poll; anything else propagates immediately.
        """

        return self.run(self.describe(predicate, timeout, message), ignored_exceptions)

    def run(
        self,
        descriptor: WaitDescriptor,
        ignored_exceptions: tuple[type[BaseException], ...] = (),
    ) -> Any:
        session = self._session_provider()
        start = self._clock()
        deadline = start + descriptor.timeout / 1000.0
        interval = self.poll_interval / 1000.0
        attempts = 0
        while True:
            attempts += 1
            try:
                value = descriptor.predicate(session)
            except ignored_exceptions as exc:
                LOGGER.debug("Ignoring %r while polling", exc)
                value = None
            now = self._clock()
            # a result that settles after the deadline is discarded
            if value and now <= deadline:
                LOGGER.debug(
                    "Condition met after %d attempts (%.0fms)",
                    attempts,
                    (now - start) * 1000,
                )
                return value
            if now >= deadline:
                raise WaitTimeoutError(
                    descriptor.message,
                    timeout=descriptor.timeout,
                    elapsed=(now - start) * 1000,
                )
            self._sleep(min(interval, deadline - now))

    # -------------------------------------------------------------------
    # Attribute waits
    # -------------------------------------------------------------------

    def wait_until_attribute_equals(
        self,
        selector: str,
        attribute: str,
        value: str,
        timeout: Optional[int] = None,
    ) -> bool:
        return self._attribute_wait(
            attribute_equals(selector, attribute, value),
            "{attribute} does not equal {value} after {timeout} milliseconds",
            timeout,
            attribute=attribute,
            value=value,
        )

    def wait_until_attribute_exists(
        self,
        selector: str,
        attribute: str,
        timeout: Optional[int] = None,
    ) -> bool:
        return self._attribute_wait(
            attribute_exists(selector, attribute),
            "{attribute} does not exist after {timeout} milliseconds",
            timeout,
            attribute=attribute,
        )

    def wait_until_attribute_does_not_exist(
        self,
        selector: str,
        attribute: str,
        timeout: Optional[int] = None,
    ) -> bool:
        return self._attribute_wait(
            attribute_absent(selector, attribute),
            "{attribute} still exists after {timeout} milliseconds",
            timeout,
            attribute=attribute,
        )

    def wait_for_element(self, selector: str, timeout: Optional[int] = None) -> Any:
        """Wait until a CSS or XPath selector matches and return the element."""

        timeout = timeout or self.default_timeout
        return self.wait_until(
            element_located(selector),
            timeout,
            f"{selector} was not found after {timeout} milliseconds",
        )

    def _attribute_wait(
        self,
        predicate: Predicate,
        template: str,
        timeout: Optional[int],
        **fields: str,
    ) -> bool:
        timeout = timeout or self.default_timeout
        message = template.format(timeout=timeout, **fields)
        return self.wait_until(
            predicate,
            timeout,
            message,
            ignored_exceptions=(ElementNotFoundError,),
        )

    # -------------------------------------------------------------------
    # Windows
    # -------------------------------------------------------------------

    def wait_for_new_windows(self, timeout: Optional[int] = None) -> Optional[list[Any]]:
        """Return every open window once a second one appears.

        Checks once per second and returns ``None`` when the timeout passes
        without a new window. Never raises on timeout.
        """

        timeout = timeout or self.default_timeout
        session = self._session_provider()
        for _ in range(0, timeout, WINDOW_POLL_INTERVAL):
            windows = session.window_handles()
            if len(windows) > 1:
                return windows
            self._sleep(WINDOW_POLL_INTERVAL / 1000.0)
        LOGGER.debug("No new window opened within %d milliseconds", timeout)
        return None
