import pytest

from browser_world.config import RunnerConfig
from browser_world.errors import SessionNotActiveError, TeardownError
from browser_world.lifecycle import SessionManager, SessionState, TeardownStatus
from browser_world.models import ScenarioOutcome, ScenarioStatus

from stubs import StubBrowserSession


class RecordingFactory:
    def __init__(self, **session_kwargs) -> None:
        self.session_kwargs = session_kwargs
        self.sessions: list[StubBrowserSession] = []

    def __call__(self, config) -> StubBrowserSession:
        session = StubBrowserSession(config.name, **self.session_kwargs)
        self.sessions.append(session)
        return session


def build_manager(factory: RecordingFactory | None = None, **config) -> SessionManager:
    return SessionManager(
        RunnerConfig.model_validate({"browser": {"name": "chrome"}, **config}),
        factory or RecordingFactory(),
    )


def test_session_is_created_lazily_and_reused():
    factory = RecordingFactory()
    manager = build_manager(factory)
    assert manager.state == SessionState.UNINITIALIZED
    assert manager.session is None

    first = manager.ensure_session()
    second = manager.ensure_session()

    assert first is second
    assert manager.state == SessionState.ACTIVE
    assert len(factory.sessions) == 1
    assert manager.created_count == 1


def test_require_session_before_creation_raises():
    manager = build_manager()

    with pytest.raises(SessionNotActiveError):
        manager.require_session()


def test_teardown_closes_then_quits_exactly_once():
    factory = RecordingFactory()
    manager = build_manager(factory)
    session = manager.ensure_session()

    manager.teardown()
    manager.teardown()

    assert session.calls == ["close", "quit"]
    assert manager.state == SessionState.CLOSED
    assert manager.session is None


def test_teardown_skips_quit_when_close_releases_everything():
    factory = RecordingFactory(releases_on_close=True)
    manager = build_manager(factory)
    session = manager.ensure_session()

    manager.teardown()

    assert session.calls == ["close"]


def test_closed_session_is_replaced_on_next_scenario():
    factory = RecordingFactory()
    manager = build_manager(factory)
    first = manager.ensure_session()
    manager.teardown()

    second = manager.ensure_session()

    assert second is not first
    assert manager.state == SessionState.ACTIVE
    assert manager.created_count == 2


def test_teardown_failure_is_reported_and_session_closed():
    factory = RecordingFactory()
    manager = build_manager(factory)
    session = manager.ensure_session()
    session.fail_close = RuntimeError("window already gone")

    task = manager.schedule_teardown()
    with pytest.raises(TeardownError, match="window already gone"):
        task.run()

    assert task.status == TeardownStatus.FAILED
    assert isinstance(task.error, TeardownError)
    assert manager.state == SessionState.CLOSED
    assert session.calls == ["close", "quit"]


def test_failed_close_without_quit_step_only_closes():
    factory = RecordingFactory(releases_on_close=True)
    manager = build_manager(factory)
    session = manager.ensure_session()
    session.fail_close = RuntimeError("profile locked")

    with pytest.raises(TeardownError, match="profile locked"):
        manager.teardown()

    assert session.calls == ["close"]
    assert manager.session is None


def test_pending_teardown_is_shared_and_cancellable():
    manager = build_manager()
    session = manager.ensure_session()

    task = manager.schedule_teardown()
    assert manager.schedule_teardown() is task
    assert task.cancel() is True
    task.run()

    assert task.status == TeardownStatus.CANCELLED
    assert session.calls == []
    assert manager.state == SessionState.ACTIVE
    assert task.cancel() is False


def test_teardown_without_session_is_a_noop():
    manager = build_manager()

    task = manager.schedule_teardown()
    task.run()

    assert task.status == TeardownStatus.DONE
    assert manager.state == SessionState.UNINITIALIZED


def test_failed_scenario_captures_screenshot_before_hygiene():
    manager = build_manager()
    session = manager.ensure_session()
    outcome = ScenarioOutcome(name="Broken login", status=ScenarioStatus.FAILED)

    manager.finish_scenario(outcome)

    assert outcome.screenshot == b"png-bytes"
    assert session.calls == ["screenshot", "clear_cookies", "clear_storages"]
    assert manager.state == SessionState.ACTIVE


def test_screenshots_can_be_disabled():
    manager = build_manager(no_screenshot=True)
    session = manager.ensure_session()
    outcome = ScenarioOutcome(name="Broken login", status=ScenarioStatus.FAILED)

    manager.finish_scenario(outcome)

    assert outcome.screenshot is None
    assert session.calls == ["clear_cookies", "clear_storages"]


def test_passed_scenario_only_clears_state():
    manager = build_manager()
    session = manager.ensure_session()

    manager.finish_scenario(ScenarioOutcome(name="Happy path"))

    assert session.calls == ["clear_cookies", "clear_storages"]
    assert session.cookies == {}
    assert session.storage == {}


def test_none_policy_keeps_cookies_and_storage():
    manager = build_manager(teardown="none")
    session = manager.ensure_session()
    outcome = ScenarioOutcome(name="Broken checkout", status=ScenarioStatus.FAILED)

    manager.finish_scenario(outcome)
    manager.teardown()

    assert outcome.screenshot == b"png-bytes"
    assert session.cookies == {"session": "abc"}
    assert session.storage == {"token": "xyz"}
    assert session.calls == ["screenshot", "close", "quit"]


def test_screenshot_failure_does_not_block_hygiene():
    manager = build_manager()
    session = manager.ensure_session()
    session.fail_screenshot = RuntimeError("page crashed")
    outcome = ScenarioOutcome(name="Crash", status=ScenarioStatus.FAILED)

    manager.finish_scenario(outcome)

    assert outcome.screenshot is None
    assert session.calls[-2:] == ["clear_cookies", "clear_storages"]


def test_clearing_cookies_and_storage_is_idempotent():
    manager = build_manager()
    session = manager.ensure_session()

    manager.clear_cookies_and_storages()
    once = (dict(session.cookies), dict(session.storage))
    manager.clear_cookies_and_storages()

    assert (session.cookies, session.storage) == once


def test_finish_scenario_without_session_returns_outcome():
    manager = build_manager()
    outcome = ScenarioOutcome(name="No browser", status=ScenarioStatus.FAILED)

    assert manager.finish_scenario(outcome) is outcome
    assert outcome.screenshot is None


def test_visual_checker_is_aborted_after_failure():
    class Checker:
        aborted = 0

        def abort_if_not_closed(self):
            self.aborted += 1

    manager = build_manager()
    manager.ensure_session()
    checker = Checker()
    manager.visual_checker = checker

    manager.finish_scenario(ScenarioOutcome(name="ok"))
    manager.finish_scenario(ScenarioOutcome(name="bad", status=ScenarioStatus.FAILED))

    assert checker.aborted == 1
