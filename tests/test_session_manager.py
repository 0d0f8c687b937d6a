from unittest.mock import Mock

import pytest

from bg_editor.app.errors import SessionNotFoundError
from bg_editor.session.session_manager import SessionManager


@pytest.fixture
def manager():
    return SessionManager(lambda session_id: Mock(session_id=session_id))


def test_create_and_load(manager):
    editor = manager.create_session()

    assert editor.session_id.startswith("sess_")
    assert manager.load_session(editor.session_id) is editor
    assert len(manager) == 1


def test_ids_are_unique(manager):
    ids = {manager.create_session().session_id for _ in range(50)}
    assert len(ids) == 50


def test_load_unknown(manager):
    with pytest.raises(SessionNotFoundError):
        manager.load_session("sess_nope")


def test_drop_resets_and_forgets(manager):
    editor = manager.create_session()

    manager.drop_session(editor.session_id)

    editor.reset.assert_called_once_with()
    assert manager.session_ids() == []
    with pytest.raises(SessionNotFoundError):
        manager.drop_session(editor.session_id)


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _idle_editor(session_id):
    editor = Mock(session_id=session_id)
    editor.state.loading = False
    return editor


class TestEviction:
    def test_idle_sessions_expire_on_next_create(self):
        clock = Clock()
        manager = SessionManager(_idle_editor, idle_ttl_s=60, clock=clock)
        stale = manager.create_session()
        clock.now += 30
        fresh = manager.create_session()

        clock.now += 45
        manager.create_session()

        assert stale.session_id not in manager.session_ids()
        assert fresh.session_id in manager.session_ids()
        stale.reset.assert_called_once_with()
        with pytest.raises(SessionNotFoundError):
            manager.load_session(stale.session_id)

    def test_load_keeps_session_alive(self):
        clock = Clock()
        manager = SessionManager(_idle_editor, idle_ttl_s=60, clock=clock)
        editor = manager.create_session()

        clock.now += 50
        manager.load_session(editor.session_id)
        clock.now += 50

        assert manager.evict_idle() == []
        assert len(manager) == 1

    def test_busy_session_is_not_expired(self):
        clock = Clock()
        manager = SessionManager(_idle_editor, idle_ttl_s=60, clock=clock)
        editor = manager.create_session()
        editor.state.loading = True

        clock.now += 600

        assert manager.evict_idle() == []
        editor.reset.assert_not_called()

    def test_capacity_evicts_least_recently_used(self):
        clock = Clock()
        manager = SessionManager(_idle_editor, max_sessions=2, clock=clock)
        first = manager.create_session()
        clock.now += 1
        second = manager.create_session()
        clock.now += 1
        manager.load_session(first.session_id)
        clock.now += 1

        third = manager.create_session()

        assert set(manager.session_ids()) == {first.session_id, third.session_id}
        second.reset.assert_called_once_with()

    def test_no_limits_by_default(self, manager):
        for _ in range(20):
            manager.create_session()
        assert manager.evict_idle() == []
        assert len(manager) == 20
