"""Ownership of the single browser session shared by a test run."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from .browser.base import BrowserSession
from .config import BrowserConfig, RunnerConfig, TeardownPolicy
from .errors import SessionNotActiveError, TeardownError
from .factory import build_session
from .models import ScenarioOutcome

LOGGER = logging.getLogger(__name__)

SessionFactory = Callable[[BrowserConfig], BrowserSession]


class SessionState(str, enum.Enum):
    """Lifecycle states of the shared session."""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


class TeardownStatus(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


class VisualChecker(Protocol):
    """Optional visual-diff session that must be aborted after a failure."""

    def abort_if_not_closed(self) -> object:
        ...


@dataclass
class TeardownTask:
    """A single, explicit attempt to close the shared session.

    ``run`` executes the teardown once; calling it again, or calling it on a
    cancelled task, does nothing. ``cancel`` only succeeds while the task is
    still pending.
    """

    action: Optional[Callable[[], None]] = None
    status: TeardownStatus = TeardownStatus.PENDING
    error: Optional[TeardownError] = field(default=None, repr=False)

    @classmethod
    def noop(cls) -> "TeardownTask":
        return cls(action=None, status=TeardownStatus.DONE)

    @property
    def in_flight(self) -> bool:
        return self.status in (TeardownStatus.PENDING, TeardownStatus.RUNNING)

    def cancel(self) -> bool:
        if self.status != TeardownStatus.PENDING:
            return False
        self.status = TeardownStatus.CANCELLED
        return True

    def run(self) -> None:
        if self.status != TeardownStatus.PENDING:
            return
        self.status = TeardownStatus.RUNNING
        try:
            if self.action:
                self.action()
        except TeardownError as exc:
            self.status = TeardownStatus.FAILED
            self.error = exc
            raise
        self.status = TeardownStatus.DONE


class SessionManager:
    """Create, share and destroy the run's browser session.

    At most one session is alive at a time. Steps may use it freely, but only
    the manager creates or closes it.
    """

    def __init__(
        self,
        config: RunnerConfig,
        session_factory: SessionFactory = build_session,
    ) -> None:
        self._config = config
        self._session_factory = session_factory
        self._session: Optional[BrowserSession] = None
        self._state = SessionState.UNINITIALIZED
        self._teardown: Optional[TeardownTask] = None
        self.created_count = 0
        self.visual_checker: Optional[VisualChecker] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> Optional[BrowserSession]:
        return self._session

    @property
    def policy(self) -> TeardownPolicy:
        return self._config.teardown

    def ensure_session(self) -> BrowserSession:
        """Return the live session, creating one if none exists."""

        if self._session is not None and self._session.is_live:
            LOGGER.debug("Reusing %s session", self._session.identifier)
            return self._session
        if self._teardown and self._teardown.status == TeardownStatus.RUNNING:
            raise SessionNotActiveError("Cannot create a session while teardown is running")
        LOGGER.info("Creating %s session", self._config.browser.name)
        self._session = self._session_factory(self._config.browser)
        self._state = SessionState.ACTIVE
        self._teardown = None
        self.created_count += 1
        return self._session

    def require_session(self) -> BrowserSession:
        if self._session is None or self._state != SessionState.ACTIVE:
            raise SessionNotActiveError("No browser session is active")
        return self._session

    def finish_scenario(self, outcome: ScenarioOutcome) -> ScenarioOutcome:
        """Capture failure diagnostics, then reset cookies and storage.

        The screenshot is taken from the still-active session before any
        hygiene runs. Both steps are best-effort. Under the ``none`` policy
        cookies and storage are left for the next scenario.
        """

        session = self._session
        if session is None or self._state != SessionState.ACTIVE:
            LOGGER.debug("No active session after scenario %r", outcome.name)
            return outcome
        if outcome.failed:
            if not self._config.no_screenshot:
                try:
                    outcome.screenshot = session.screenshot()
                except Exception:
                    LOGGER.exception("Failed to capture screenshot for %r", outcome.name)
            if self.visual_checker is not None:
                try:
                    self.visual_checker.abort_if_not_closed()
                except Exception:
                    LOGGER.exception("Failed to abort visual checks for %r", outcome.name)
        if self.policy == TeardownPolicy.NONE:
            return outcome
        try:
            self.clear_cookies_and_storages()
        except Exception:
            LOGGER.exception("Failed to clear cookies and storage after %r", outcome.name)
        return outcome

    def clear_cookies_and_storages(self) -> None:
        session = self.require_session()
        session.clear_cookies()
        session.clear_storages()

    def schedule_teardown(self) -> TeardownTask:
        """Return the teardown task for the current session.

        An in-flight task is returned as is. Without an active session the
        returned task is already done, so running it is a no-op.
        """

        if self._teardown is not None and self._teardown.in_flight:
            return self._teardown
        if self._session is None or self._state != SessionState.ACTIVE:
            return TeardownTask.noop()
        self._teardown = TeardownTask(action=self._close_session)
        return self._teardown

    def teardown(self) -> None:
        self.schedule_teardown().run()

    def _close_session(self) -> None:
        session = self._session
        if session is None:
            return
        self._state = SessionState.CLOSING
        LOGGER.info("Closing %s session", session.identifier)
        failure: Optional[Exception] = None
        try:
            session.close()
        except Exception as exc:
            failure = exc
        if not session.releases_on_close:
            # quit even after a failed close so the driver process is released
            try:
                session.quit()
            except Exception as exc:
                failure = failure or exc
        self._session = None
        self._state = SessionState.CLOSED
        if failure is not None:
            raise TeardownError(
                f"Failed to close {session.identifier} session: {failure}"
            ) from failure
