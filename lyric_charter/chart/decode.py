from __future__ import annotations

import logging
from typing import Callable

import regex

from .model import (
    Anchor,
    Beat,
    Chart,
    DuetLyric,
    DuetPhraseEnd,
    DuetPhraseStart,
    KeyPressEvent,
    Lyric,
    LyricEvent,
    Note,
    OtherKeyPress,
    OtherLyricEvent,
    OtherTempoEvent,
    PhraseEnd,
    PhraseStart,
    Section,
    Special,
    TempoEvent,
    TextEvent,
    TimeSignature,
)

logger = logging.getLogger(__name__)

_HEADER_RE = regex.compile(r"\[(?P<header>[^\]]+)\]")
_PROPERTY_RE = regex.compile(r" {2}(?P<property>[^ =]+) = (?P<content>[^\n\r]+)")
# content is optional so that e.g. "  100 = TS" reaches the decoder and fails loudly
_EVENT_RE = regex.compile(r" {2}(?P<timestamp>\d+) = (?P<type>\w+)(?: (?P<content>[^\n\r]*))?")
# ASCII only: other Unicode digits pass _EVENT_RE and are rejected here
_UINT_RE = regex.compile(r"[0-9]+")

_DEFAULT_TS_EXPONENT = 2


class ChartDecodeError(ValueError):
    pass


class ChartFieldError(ChartDecodeError):
    """A captured field is missing or is not a valid number."""

    def __init__(self, message: str, raw: str, section: str):
        super().__init__(f"{message} {raw!r} in [{section}]")
        self.raw = raw
        self.section = section


def _parse_uint(raw: str, section: str) -> int:
    s = raw.strip()
    if not _UINT_RE.fullmatch(s):
        raise ChartFieldError("invalid integer", raw, section)
    return int(s)


def _split_pair(content: str, section: str) -> tuple[str, str]:
    first, sep, second = content.partition(" ")
    if not sep:
        raise ChartFieldError("no duration in", content, section)
    return first, second


def decode_properties(block: str, properties: dict[str, str]) -> None:
    for m in _PROPERTY_RE.finditer(block):
        properties[m.group("property")] = m.group("content")


def decode_tempo_map(block: str, section: str = "SyncTrack") -> list[TempoEvent]:
    out: list[TempoEvent] = []
    for m in _EVENT_RE.finditer(block):
        timestamp = _parse_uint(m.group("timestamp"), section)
        code = m.group("type")
        content = m.group("content") or ""

        if code == "A":
            out.append(Anchor(timestamp=timestamp, song_microseconds=_parse_uint(content, section)))
        elif code == "B":
            out.append(Beat(timestamp=timestamp, milli_bpm=_parse_uint(content, section)))
        elif code == "TS":
            args = content.split(" ")
            if not args[0].strip():
                raise ChartFieldError("no numerator in", content, section)
            numerator = _parse_uint(args[0], section)
            exponent = _DEFAULT_TS_EXPONENT
            if len(args) > 1 and _UINT_RE.fullmatch(args[1].strip()):
                exponent = int(args[1].strip())
            out.append(TimeSignature(timestamp=timestamp, time_signature=(numerator, 2**exponent)))
        else:
            out.append(OtherTempoEvent(code=code, timestamp=timestamp, content=content))
    return out


_LYRIC_SUBTYPES: dict[str, Callable[[int, str], LyricEvent]] = {
    "section": lambda ts, text: Section(timestamp=ts, text=text),
    "phrase_start": lambda ts, _text: PhraseStart(timestamp=ts),
    "lyric": lambda ts, text: Lyric(timestamp=ts, text=text),
    "phrase_end": lambda ts, _text: PhraseEnd(timestamp=ts),
    "duet_phrase_start": lambda ts, _text: DuetPhraseStart(timestamp=ts),
    "duet_lyric": lambda ts, text: DuetLyric(timestamp=ts, text=text),
    "duet_phrase_end": lambda ts, _text: DuetPhraseEnd(timestamp=ts),
}


def decode_lyrics(block: str, section: str = "Events") -> list[LyricEvent]:
    out: list[LyricEvent] = []
    for m in _EVENT_RE.finditer(block):
        timestamp = _parse_uint(m.group("timestamp"), section)
        code = m.group("type")
        content = (m.group("content") or "").replace('"', "")
        subtype, _sep, text = content.partition(" ")

        make = _LYRIC_SUBTYPES.get(subtype) if code == "E" else None
        if make is None:
            out.append(OtherLyricEvent(code=code, timestamp=timestamp, content=content))
        else:
            out.append(make(timestamp, text))
    return out


def decode_key_presses(block: str, section: str) -> list[KeyPressEvent]:
    out: list[KeyPressEvent] = []
    for m in _EVENT_RE.finditer(block):
        timestamp = _parse_uint(m.group("timestamp"), section)
        code = m.group("type")
        content = m.group("content") or ""

        if code == "N":
            key_s, duration_s = _split_pair(content, section)
            out.append(
                Note(
                    timestamp=timestamp,
                    duration=_parse_uint(duration_s, section),
                    key=_parse_uint(key_s, section),
                )
            )
        elif code == "S":
            type_s, duration_s = _split_pair(content, section)
            out.append(
                Special(
                    timestamp=timestamp,
                    special_type=_parse_uint(type_s, section),
                    duration=_parse_uint(duration_s, section),
                )
            )
        elif code == "E":
            out.append(TextEvent(timestamp=timestamp, content=content))
        else:
            out.append(OtherKeyPress(code=code, timestamp=timestamp, content=content))
    return out


def decode_chart(text: str) -> Chart:
    """
    Decode the text of a .chart file.

    Sections:
    - [Song]       -> properties ("  key = value")
    - [SyncTrack]  -> tempo map (A / B / TS, anything else kept as OtherTempoEvent)
    - [Events]     -> lyric events ("  t = E \"subtype text\"")
    - anything else is a key-press track named after its header

    Raises ChartDecodeError on the first malformed field; no partial chart
    is returned.
    """
    properties: dict[str, str] = {}
    lyrics: list[LyricEvent] = []
    tempo_map: list[TempoEvent] = []
    key_presses: dict[str, list[KeyPressEvent]] = {}

    for block in text.split("}"):
        hm = _HEADER_RE.search(block)
        if hm is None:
            if block.strip():
                logger.debug("Skipping block without header (%d chars)", len(block))
            continue
        header = hm.group("header")
        body = block[hm.end() :]

        if header == "Song":
            decode_properties(body, properties)
        elif header == "SyncTrack":
            tempo_map.extend(decode_tempo_map(body, header))
        elif header == "Events":
            lyrics.extend(decode_lyrics(body, header))
        else:
            if header in key_presses:
                logger.debug("Track [%s] appears more than once, keeping the last one", header)
            key_presses[header] = decode_key_presses(body, header)

    logger.debug(
        "Decoded chart: %d properties, %d tempo events, %d lyric events, %d tracks",
        len(properties),
        len(tempo_map),
        len(lyrics),
        len(key_presses),
    )
    return Chart(
        properties=properties,
        lyrics=tuple(lyrics),
        tempo_map=tuple(tempo_map),
        key_presses=key_presses,
    )
