"""Tests for the SQLite citation store."""

import pytest

from citekit.core.models import CanonicalRecord
from citekit.core.store import CitationStore


@pytest.fixture()
def store(tmp_path):
    """Create a fresh CitationStore in a temp directory."""
    s = CitationStore(tmp_path / "nested" / "citations.db")
    yield s
    s.close()


def _rec(**kw):
    defaults = dict(type="book", title="Study A", authors=[{"given": "Jane", "family": "Smith"}], year=2020)
    defaults.update(kw)
    return CanonicalRecord(**defaults)


# ── Setup ────────────────────────────────────────────────────────────


def test_parent_directory_created(store, tmp_path):
    assert (tmp_path / "nested").is_dir()


def test_wal_mode(store):
    mode = store._conn.execute("PRAGMA journal_mode").fetchone()[0]
    assert mode == "wal"


# ── Add & Get ────────────────────────────────────────────────────────


def test_add_and_get_round_trip(store):
    rec = _rec(doi="10.1/a", datePublished="2020-03-15")
    record_id = store.add(rec)
    assert store.get(record_id) == rec
    assert store.count() == 1


def test_ids_unique(store):
    ids = {store.add(_rec()) for _ in range(5)}
    assert len(ids) == 5


def test_get_missing_raises(store):
    with pytest.raises(ValueError, match="not found"):
        store.get("nope")


# ── Ordering ─────────────────────────────────────────────────────────


def test_entries_orders(store):
    first = store.add(_rec(title="banana"))
    second = store.add(_rec(title="Apple"))
    third = store.add(_rec(title="cherry"))

    assert [i for i, _ in store.entries()] == [third, second, first]
    assert [i for i, _ in store.entries("added")] == [first, second, third]
    assert [r.title for r in store.records("title")] == ["Apple", "banana", "cherry"]


def test_untitled_sorts_first(store):
    store.add(_rec(title="Zeta"))
    store.add(_rec(title=None))
    assert [r.title for r in store.records("title")] == [None, "Zeta"]


def test_invalid_order(store):
    with pytest.raises(ValueError, match="Invalid order"):
        store.entries("random")


# ── Edit & Remove ────────────────────────────────────────────────────


def test_replace_keeps_position(store):
    first = store.add(_rec(title="One"))
    store.add(_rec(title="Two"))
    store.replace(first, _rec(title="One (edited)"))

    assert store.get(first).title == "One (edited)"
    assert [r.title for r in store.records("added")] == ["One (edited)", "Two"]


def test_replace_missing_raises(store):
    with pytest.raises(ValueError):
        store.replace("nope", _rec())


def test_remove(store):
    record_id = store.add(_rec())
    store.remove(record_id)
    assert store.count() == 0
    with pytest.raises(ValueError):
        store.remove(record_id)


def test_clear(store):
    for _ in range(3):
        store.add(_rec())
    assert store.clear() == 3
    assert store.count() == 0
    assert store.entries() == []


# ── Persistence ──────────────────────────────────────────────────────


def test_records_survive_reopen(tmp_path):
    path = tmp_path / "citations.db"
    s1 = CitationStore(path)
    record_id = s1.add(_rec(title="Durable"))
    s1.close()

    s2 = CitationStore(path)
    assert s2.get(record_id).title == "Durable"
    s2.close()
