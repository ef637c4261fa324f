"""
Unit tests for the SQLite-backed actor store.
"""

from unittest.mock import patch

import pytest

from memoflow.services.memory import ActorStore


def test_load_missing_actor_returns_none(actor_store):
    assert actor_store.load("nobody") is None


def test_append_creates_record_and_keeps_order(actor_store):
    assert actor_store.append("a1", "first") == 1
    assert actor_store.append("a1", "second") == 2

    profile, history = actor_store.load("a1")

    assert profile is None
    assert history == ["first", "second"]


def test_profile_and_history_are_independent(actor_store):
    actor_store.append("a1", "turn one")
    actor_store.put_profile("a1", {"name": "Ada", "tags": ["math"]})
    actor_store.append("a1", "turn two")

    profile, history = actor_store.load("a1")

    assert profile == {"name": "Ada", "tags": ["math"]}
    assert history == ["turn one", "turn two"]


def test_put_profile_before_any_turn_creates_empty_history(actor_store):
    actor_store.put_profile("a2", "prefers short answers")

    assert actor_store.load("a2") == ("prefers short answers", [])


def test_records_survive_a_new_store_instance(tmp_path):
    path = tmp_path / "memory.db"
    ActorStore(path).append("a1", "durable")

    assert ActorStore(path).load("a1") == (None, ["durable"])


def test_failed_append_leaves_history_untouched(actor_store):
    actor_store.append("a1", "kept")

    with patch("memoflow.services.memory.store.json.dumps", side_effect=ValueError("boom")):
        with pytest.raises(ValueError):
            actor_store.append("a1", "lost")

    assert actor_store.load("a1") == (None, ["kept"])
    assert actor_store.append("a1", "next") == 2
