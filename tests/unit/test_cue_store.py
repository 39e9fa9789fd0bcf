from __future__ import annotations

import logging

import pytest

from cuesync.core.errors import InvalidArgumentError, OutOfRangeError
from cuesync.core.store import (
    CHANGE_ADD,
    CHANGE_DELETE,
    CHANGE_UPDATE,
    CueStore,
    StoreChange,
    coerce_field_value,
)
from cuesync.schemas.cue import Cue


def _store(*texts: str) -> CueStore:
    store = CueStore()
    for index, text in enumerate(texts):
        store.add(Cue(start=float(index), end=float(index) + 1.0, text=text))
    return store


def test_add_appends_in_insertion_order() -> None:
    store = CueStore()
    assert store.add(Cue(start=5.0, end=7.0, text="late")) == 0
    assert store.add(Cue(start=0.0, end=2.0, text="early")) == 1
    assert [cue.text for cue in store.list()] == ["late", "early"]
    assert len(store) == 2


def test_update_replaces_single_field() -> None:
    store = _store("a", "b")
    assert store.update(1, "text", "changed") is True
    assert store[1] == Cue(start=1.0, end=2.0, text="changed")
    assert store[0].text == "a"
    assert len(store) == 2


def test_update_accepts_browser_field_names_and_numeric_strings() -> None:
    store = _store("a")
    assert store.update(0, "startTime", "0.25") is True
    assert store.update(0, "endTime", 4) is True
    assert store[0].start == pytest.approx(0.25)
    assert store[0].end == pytest.approx(4.0)


def test_update_does_not_validate_time_ranges() -> None:
    store = _store("a")
    assert store.update(0, "end", -3.0) is True
    assert store[0].end == pytest.approx(-3.0)
    assert store[0].end < store[0].start


@pytest.mark.parametrize("value", ["abc", "", None, float("nan"), float("inf"), True])
def test_update_ignores_malformed_time_value(value: object, caplog) -> None:
    store = _store("a")
    before = store.list()
    with caplog.at_level(logging.WARNING, logger="cuesync"):
        assert store.update(0, "start", value) is False
    assert store.list() == before
    assert "Ignoring edit" in caplog.text


def test_update_ignores_unknown_field() -> None:
    store = _store("a")
    assert store.update(0, "speaker", "Bob") is False
    assert store[0] == Cue(start=0.0, end=1.0, text="a")


@pytest.mark.parametrize("position", [2, 5, -1, "0", True])
def test_update_rejects_invalid_position(position: object) -> None:
    store = _store("a", "b")
    with pytest.raises(OutOfRangeError):
        store.update(position, "text", "x")


def test_delete_reindexes_following_cues() -> None:
    store = _store("first", "second", "third")
    removed = store.delete(0)
    assert removed.text == "first"
    assert [cue.text for cue in store.list()] == ["second", "third"]

    store.update(0, "text", "edited")
    assert [cue.text for cue in store.list()] == ["edited", "third"]


def test_delete_rejects_stale_position() -> None:
    store = _store("a")
    store.delete(0)
    with pytest.raises(OutOfRangeError, match="out of range"):
        store.delete(0)


def test_list_is_a_snapshot() -> None:
    store = _store("a")
    snapshot = store.list()
    store.add(Cue(start=9.0, end=10.0))
    store.update(0, "text", "b")
    assert snapshot == (Cue(start=0.0, end=1.0, text="a"),)


def test_subscribers_receive_committed_changes() -> None:
    store = CueStore()
    changes: list[StoreChange] = []
    unsubscribe = store.subscribe(changes.append)

    store.add(Cue(start=0.0, end=2.0))
    store.update(0, "text", "hello")
    store.update(0, "start", "bogus")
    store.delete(0)
    unsubscribe()
    store.add(Cue(start=1.0, end=3.0))

    assert [change.kind for change in changes] == [CHANGE_ADD, CHANGE_UPDATE, CHANGE_DELETE]
    assert changes[1].cue.text == "hello"
    assert changes[2].position == 0


def test_failing_subscriber_does_not_block_mutation(caplog) -> None:
    store = CueStore()
    seen: list[str] = []

    def _broken(_: StoreChange) -> None:
        raise RuntimeError("overlay crashed")

    store.subscribe(_broken)
    store.subscribe(lambda change: seen.append(change.kind))
    with caplog.at_level(logging.ERROR, logger="cuesync"):
        store.add(Cue(start=0.0, end=1.0))

    assert len(store) == 1
    assert seen == [CHANGE_ADD]
    assert "listener failed" in caplog.text


def test_coerce_field_value_stringifies_text() -> None:
    assert coerce_field_value("text", 42) == ("text", "42")
    assert coerce_field_value("TEXT", None) == ("text", "")
    with pytest.raises(InvalidArgumentError, match="Unknown cue field"):
        coerce_field_value("duration", 1.0)


def test_update_ignores_integer_too_large_for_float(caplog) -> None:
    store = _store("a")
    with caplog.at_level(logging.WARNING, logger="cuesync"):
        assert store.update(0, "end", 10**400) is False
    assert store[0] == Cue(start=0.0, end=1.0, text="a")
    assert "Ignoring edit" in caplog.text
