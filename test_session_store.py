"""Tests for the in-memory session store."""
from datetime import datetime, timedelta, timezone

import pytest

from studio.store import SessionStore


def test_create_get_delete():
    store = SessionStore(ttl_minutes=60)

    session = store.create()

    assert store.get(session.id) is session
    assert len(store) == 1
    assert store.delete(session.id) is session
    with pytest.raises(KeyError):
        store.get(session.id)


def test_expired_sessions_are_purged():
    store = SessionStore(ttl_minutes=5)
    stale = store.create()
    fresh = store.create()
    stale.last_active = datetime.now(timezone.utc) - timedelta(minutes=10)

    assert store.purge_expired() == [stale.id]
    assert store.get(fresh.id) is fresh
    with pytest.raises(KeyError):
        store.get(stale.id)


def test_get_of_expired_session_raises():
    store = SessionStore(ttl_minutes=1)
    session = store.create()
    session.last_active = datetime.now(timezone.utc) - timedelta(minutes=2)

    with pytest.raises(KeyError):
        store.get(session.id)
    assert len(store) == 0
