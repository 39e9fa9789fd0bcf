from __future__ import annotations

from pathlib import Path

from cuesync.core.exporter import EXPORT_FILENAME, export_srt, write_srt
from cuesync.core.store import CueStore
from cuesync.schemas.cue import Cue


def test_export_two_cues_matches_srt_layout() -> None:
    cues = [
        Cue(start=0.0, end=2.0, text="Hi"),
        Cue(start=5.0, end=7.0, text="Bye"),
    ]
    assert export_srt(cues) == (
        "1\n"
        "00:00:00,000 --> 00:00:02,000\n"
        "Hi\n"
        "\n"
        "2\n"
        "00:00:05,000 --> 00:00:07,000\n"
        "Bye\n"
    )


def test_export_empty_returns_empty_string() -> None:
    assert export_srt([]) == ""


def test_export_numbers_by_start_time_rank() -> None:
    cues = [
        Cue(start=10.0, end=11.0, text="third"),
        Cue(start=0.0, end=1.0, text="first"),
        Cue(start=5.0, end=6.0, text="second"),
    ]
    blocks = export_srt(cues).split("\n\n")
    assert [block.splitlines()[0] for block in blocks] == ["1", "2", "3"]
    assert [block.splitlines()[2] for block in blocks] == ["first", "second", "third"]


def test_export_keeps_insertion_order_for_equal_starts() -> None:
    cues = [
        Cue(start=3.0, end=4.0, text="later"),
        Cue(start=1.0, end=5.0, text="tie-a"),
        Cue(start=1.0, end=2.0, text="tie-b"),
        Cue(start=1.0, end=1.5, text="tie-c"),
    ]
    texts = [block.splitlines()[2] for block in export_srt(cues).split("\n\n")]
    assert texts == ["tie-a", "tie-b", "tie-c", "later"]


def test_export_does_not_reorder_store() -> None:
    store = CueStore()
    store.add(Cue(start=9.0, end=10.0, text="b"))
    store.add(Cue(start=1.0, end=2.0, text="a"))
    before = store.list()

    export_srt(store.list())

    assert store.list() == before
    assert [cue.text for cue in store.list()] == ["b", "a"]


def test_export_keeps_zero_duration_and_multiline_text_verbatim() -> None:
    cues = [Cue(start=1.5, end=1.5, text="  line one\nline two ")]
    assert export_srt(cues) == (
        "1\n00:00:01,500 --> 00:00:01,500\n  line one\nline two \n"
    )


def test_write_srt_writes_utf8_file(tmp_path: Path) -> None:
    output_path = tmp_path / "nested" / EXPORT_FILENAME
    cues = [Cue(start=0.0, end=1.234, text="첫 번째 줄")]

    written = write_srt(cues, output_path)

    assert written == output_path
    assert output_path.name == "subtitles.srt"
    assert output_path.read_bytes() == (
        "1\n00:00:00,000 --> 00:00:01,234\n첫 번째 줄\n".encode("utf-8")
    )


def test_export_survives_end_time_beyond_millisecond_range() -> None:
    store = CueStore([Cue(start=1.0, end=2.0, text="far")])
    assert store.update(0, "end", "1e306") is True

    assert export_srt(store.list()) == "1\n00:00:01,000 --> 00:00:00,000\nfar\n"
