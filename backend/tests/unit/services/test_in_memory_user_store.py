# tests/unit/services/test_in_memory_user_store.py
from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from authcore.services._shared.errors import ConflictError, NotFoundError


def test_create_normalizes_and_starts_unverified(store):
    record = store.create("  Mixed@Case.COM ", "digest", name="  ")

    assert record.email == "mixed@case.com"
    assert record.name is None
    assert record.email_verified is False
    assert record.token_version == 0
    assert store.find_by_email("MIXED@case.com") == record


def test_create_conflict(store):
    store.create("one@example.com", "digest")
    with pytest.raises(ConflictError):
        store.create("ONE@example.com", "digest")


def test_updates_touch_updated_at(store, clock):
    record = store.create("one@example.com", "digest")
    clock.advance(timedelta(minutes=5))

    updated = store.update_credential(record.id, "new-digest")

    assert updated.credential_digest == "new-digest"
    assert updated.updated_at == record.created_at + timedelta(minutes=5)


def test_unknown_ids_raise_not_found(store):
    with pytest.raises(NotFoundError):
        store.update_credential("nope", "d")
    with pytest.raises(NotFoundError):
        store.set_verified("nope")
    with pytest.raises(NotFoundError):
        store.increment_revocation_counter("nope")
    assert store.find_by_id("nope") is None


def test_update_profile_rejects_non_profile_fields(store):
    record = store.create("one@example.com", "digest")
    with pytest.raises(ValueError):
        store.update_profile(record.id, token_version=5)


def test_concurrent_creates_with_same_email_leave_one_account(store):
    outcomes: list[str] = []
    barrier = threading.Barrier(4)

    def worker():
        barrier.wait()
        try:
            store.create("race@example.com", "digest")
            outcomes.append("created")
        except ConflictError:
            outcomes.append("conflict")

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["conflict", "conflict", "conflict", "created"]
