from __future__ import annotations

import logging
from typing import Iterable, Sequence

from lyric_charter.chart.model import (
    DuetLyric,
    DuetPhraseEnd,
    DuetPhraseStart,
    Lyric,
    LyricEvent,
    PhraseEnd,
    PhraseStart,
)

from .model import LyricPhraseCollection, Phrase, PhraseLyric

logger = logging.getLogger(__name__)


def _duet_track(events: Sequence[LyricEvent]) -> list[LyricEvent]:
    # Duet events remapped onto plain phrase/lyric events, everything else dropped
    out: list[LyricEvent] = []
    for e in events:
        if isinstance(e, DuetPhraseStart):
            out.append(PhraseStart(timestamp=e.timestamp))
        elif isinstance(e, DuetPhraseEnd):
            out.append(PhraseEnd(timestamp=e.timestamp))
        elif isinstance(e, DuetLyric):
            out.append(Lyric(timestamp=e.timestamp, text=e.text))
    return out


def _segment_track(events: Sequence[LyricEvent]) -> tuple[Phrase, ...]:
    """
    One phrase per PhraseStart. Window is [start_i, start_{i+1}), the last
    one unbounded. End resolution:
    1. first PhraseEnd with low < t <= high (or any t > low for the last phrase)
    2. next phrase start
    3. last lyric + 1
    4. low + 1
    """
    bounds = [e.timestamp for e in events if isinstance(e, PhraseStart)]
    phrases: list[Phrase] = []

    for i, low in enumerate(bounds):
        high = bounds[i + 1] if i + 1 < len(bounds) else None

        lyrics = tuple(
            PhraseLyric(timestamp=e.timestamp, text=e.text)
            for e in events
            if isinstance(e, Lyric) and e.timestamp >= low and (high is None or e.timestamp < high)
        )

        end = next(
            (
                e.timestamp
                for e in events
                if isinstance(e, PhraseEnd) and e.timestamp > low and (high is None or e.timestamp <= high)
            ),
            None,
        )
        if end is None:
            if high is not None:
                end = high
            elif lyrics:
                end = lyrics[-1].timestamp + 1
            else:
                end = low + 1

        phrases.append(Phrase(start_timestamp=low, end_timestamp=end, lyrics=lyrics))

    return tuple(phrases)


def segment_phrases(lyrics: Iterable[LyricEvent]) -> LyricPhraseCollection:
    events = list(lyrics)
    main = _segment_track(events)
    duet = _segment_track(_duet_track(events))
    logger.debug("Segmented %d main phrases, %d duet phrases", len(main), len(duet))
    return LyricPhraseCollection(main_phrases=main, duet_phrases=duet)


def _encode_track(phrases: Iterable[Phrase], duet: bool) -> list[LyricEvent]:
    out: list[LyricEvent] = []
    for p in phrases:
        if duet:
            out.append(DuetPhraseStart(timestamp=p.start_timestamp))
            out.extend(DuetLyric(timestamp=ly.timestamp, text=ly.text) for ly in p.lyrics)
            out.append(DuetPhraseEnd(timestamp=p.end_timestamp))
        else:
            out.append(PhraseStart(timestamp=p.start_timestamp))
            out.extend(Lyric(timestamp=ly.timestamp, text=ly.text) for ly in p.lyrics)
            out.append(PhraseEnd(timestamp=p.end_timestamp))
    return out


def _merge_tracks(main: list[LyricEvent], duet: list[LyricEvent]) -> list[LyricEvent]:
    # Interleave by timestamp without reordering either track
    out: list[LyricEvent] = []
    i = j = 0
    while i < len(main) and j < len(duet):
        if duet[j].timestamp < main[i].timestamp:
            out.append(duet[j])
            j += 1
        else:
            out.append(main[i])
            i += 1
    out.extend(main[i:])
    out.extend(duet[j:])
    return out


def encode_phrases(collection: LyricPhraseCollection) -> tuple[LyricEvent, ...]:
    """
    Serialize phrases back into lyric events.

    Each track is written in phrase order (start, lyrics, end) and the two
    tracks are interleaved by timestamp, main first on ties. Neither track is
    reordered, so phrase starts that were out of order stay out of order.
    Segmenting the result gives back the same phrases as long as the windows
    of a track do not overlap.
    """
    main = _encode_track(collection.main_phrases, duet=False)
    duet = _encode_track(collection.duet_phrases, duet=True)
    return tuple(_merge_tracks(main, duet))
