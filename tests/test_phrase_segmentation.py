from __future__ import annotations

from pathlib import Path

import pytest

from lyric_charter.chart.decode import decode_chart
from lyric_charter.chart.model import (
    DuetLyric,
    DuetPhraseEnd,
    DuetPhraseStart,
    Lyric,
    OtherLyricEvent,
    PhraseEnd,
    PhraseStart,
    Section,
)
from lyric_charter.phrases.model import LyricPhraseCollection, Phrase, PhraseLyric
from lyric_charter.phrases.segment import encode_phrases, segment_phrases

DATA = Path(__file__).parent / "data"

SCENARIO = """[Events]
{
  10 = E "phrase_start"
  12 = E "lyric" "Hel-"
  14 = E "lyric" "lo"
  16 = E "phrase_end"
  20 = E "phrase_start"
  22 = E "lyric" "World"
}
"""


def _phrase(*texts: str) -> Phrase:
    return Phrase(0, 1, tuple(PhraseLyric(i, t) for i, t in enumerate(texts)))


def test_scenario_two_phrases():
    col = segment_phrases(decode_chart(SCENARIO).lyrics)
    assert [(p.start_timestamp, p.end_timestamp, p.render()) for p in col.main_phrases] == [
        (10, 16, "Hello"),
        (20, 23, "World"),
    ]
    assert col.duet_phrases == ()


def test_sample_chart_main_and_duet():
    chart = decode_chart((DATA / "duet.chart").read_text(encoding="utf-8"))
    col = segment_phrases(chart.lyrics)
    assert [str(p) for p in col.main_phrases] == [
        "from 96 to 150, phrase: Hello world",
        "from 200 to 211, phrase: again",
    ]
    assert [str(p) for p in col.duet_phrases] == ["from 160 to 190, phrase: Second"]


class TestRender:
    def test_hyphen_joins(self):
        assert _phrase("Hel-", "lo").render() == "Hello"

    def test_space_between_words(self):
        assert _phrase("Hi", "there").render() == "Hi there"

    def test_trailing_hyphen_dropped(self):
        assert _phrase("a", "wa-").render() == "a wa"

    def test_empty(self):
        assert _phrase().render() == ""

    def test_render_lines_main_then_duet(self):
        col = LyricPhraseCollection(main_phrases=(_phrase("a"),), duet_phrases=(_phrase("b"),))
        assert col.render_lines() == ["a", "b"]


class TestEndResolution:
    def test_explicit_end_wins(self):
        (p,) = segment_phrases([PhraseStart(0), Lyric(5, "x"), PhraseEnd(8)]).main_phrases
        assert p.end_timestamp == 8

    def test_end_at_next_start_counts(self):
        events = [PhraseStart(0), Lyric(1, "a"), PhraseEnd(10), PhraseStart(10), Lyric(11, "b")]
        first, second = segment_phrases(events).main_phrases
        assert first.end_timestamp == 10
        assert second.end_timestamp == 12

    def test_falls_back_to_next_start(self):
        events = [PhraseStart(0), Lyric(1, "a"), PhraseStart(30), PhraseEnd(40)]
        first, second = segment_phrases(events).main_phrases
        assert first.end_timestamp == 30
        assert second.end_timestamp == 40

    def test_falls_back_to_last_lyric(self):
        (p,) = segment_phrases([PhraseStart(0), Lyric(3, "a"), Lyric(7, "b")]).main_phrases
        assert p.end_timestamp == 8

    def test_falls_back_to_start_plus_one(self):
        (p,) = segment_phrases([PhraseStart(42)]).main_phrases
        assert p.end_timestamp == 43
        assert p.lyrics == ()

    def test_end_at_start_does_not_close(self):
        (p,) = segment_phrases([PhraseStart(5), PhraseEnd(5), Lyric(6, "a")]).main_phrases
        assert p.end_timestamp == 7

    def test_trailing_start_is_not_an_end_marker(self):
        # Policy: a later PhraseStart bounds the window but is never read as "start - 1"
        events = [PhraseStart(0), Lyric(2, "a"), PhraseStart(10)]
        first, second = segment_phrases(events).main_phrases
        assert first.end_timestamp == 10
        assert second.end_timestamp == 11


def test_lyric_on_next_start_goes_to_next_phrase():
    events = [PhraseStart(0), Lyric(0, "a"), PhraseStart(10), Lyric(10, "b")]
    first, second = segment_phrases(events).main_phrases
    assert [ly.text for ly in first.lyrics] == ["a"]
    assert [ly.text for ly in second.lyrics] == ["b"]


def test_lyrics_before_first_start_are_dropped():
    (p,) = segment_phrases([Lyric(1, "early"), PhraseStart(5), Lyric(6, "on")]).main_phrases
    assert p.render() == "on"


def test_no_phrase_start_yields_empty_collection():
    col = segment_phrases([Lyric(1, "a"), PhraseEnd(2), Section(0, "Intro")])
    assert col == LyricPhraseCollection()


def test_sections_and_unknown_events_are_ignored():
    events = [
        PhraseStart(0),
        Section(1, "Chorus"),
        OtherLyricEvent(code="E", timestamp=2, content="crowd_clap"),
        Lyric(3, "la"),
    ]
    (p,) = segment_phrases(events).main_phrases
    assert p.lyrics == (PhraseLyric(3, "la"),)


def test_duet_tracks_are_independent():
    events = [
        PhraseStart(0),
        Lyric(1, "main"),
        DuetPhraseStart(2),
        DuetLyric(3, "duet"),
        PhraseEnd(4),
        DuetPhraseEnd(5),
    ]
    col = segment_phrases(events)
    assert [p.render() for p in col.main_phrases] == ["main"]
    assert [(p.start_timestamp, p.end_timestamp, p.render()) for p in col.duet_phrases] == [(2, 5, "duet")]


@pytest.mark.parametrize(
    "events",
    [
        [],
        [Section(0, "Intro")],
        [PhraseStart(0), PhraseStart(5), PhraseStart(9)],
        [PhraseStart(9), Lyric(10, "x"), PhraseStart(3)],
        [DuetPhraseStart(0), PhraseStart(1), Lyric(2, "y"), PhraseEnd(3)],
    ],
)
def test_phrase_count_matches_phrase_starts(events):
    col = segment_phrases(events)
    assert len(col.main_phrases) == sum(isinstance(e, PhraseStart) for e in events)
    assert len(col.duet_phrases) == sum(isinstance(e, DuetPhraseStart) for e in events)


@pytest.mark.parametrize(
    "events, empty",
    [
        ([Section(0, "Intro"), OtherLyricEvent("E", 1, "x")], True),
        ([PhraseStart(0), Lyric(1, "a")], False),
    ],
)
def test_rendering_is_empty_only_without_lyric_content(events, empty):
    rendered = "".join(str(p) for p in segment_phrases(events).main_phrases)
    assert (rendered == "") is empty


def test_windows_do_not_overlap():
    chart = decode_chart((DATA / "duet.chart").read_text(encoding="utf-8"))
    phrases = segment_phrases(chart.lyrics).main_phrases
    for a, b in zip(phrases, phrases[1:]):
        assert a.end_timestamp <= b.start_timestamp
    stamps = [ly.timestamp for p in phrases for ly in p.lyrics]
    assert len(stamps) == len(set(stamps))


def test_encode_then_segment_gives_same_phrases():
    chart = decode_chart((DATA / "duet.chart").read_text(encoding="utf-8"))
    col = segment_phrases(chart.lyrics)
    encoded = encode_phrases(col)
    assert encoded[0] == PhraseStart(96)
    assert DuetPhraseStart(160) in encoded
    assert segment_phrases(encoded) == col


def test_encode_keeps_out_of_order_phrase_starts():
    col = segment_phrases(
        [PhraseStart(20), Lyric(25, "x"), PhraseStart(10), DuetPhraseStart(5), DuetLyric(6, "d")]
    )
    assert [(p.start_timestamp, p.end_timestamp) for p in col.main_phrases] == [(20, 10), (10, 26)]

    encoded = encode_phrases(col)
    starts = [e.timestamp for e in encoded if isinstance(e, PhraseStart)]
    assert starts == [20, 10]
    assert segment_phrases(encoded) == col
