from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


# Lyric events ([Events] section)


@dataclass(frozen=True, slots=True)
class PhraseStart:
    timestamp: int


@dataclass(frozen=True, slots=True)
class PhraseEnd:
    timestamp: int


@dataclass(frozen=True, slots=True)
class Lyric:
    timestamp: int
    text: str


@dataclass(frozen=True, slots=True)
class Section:
    timestamp: int
    text: str


@dataclass(frozen=True, slots=True)
class DuetPhraseStart:
    timestamp: int


@dataclass(frozen=True, slots=True)
class DuetPhraseEnd:
    timestamp: int


@dataclass(frozen=True, slots=True)
class DuetLyric:
    timestamp: int
    text: str


@dataclass(frozen=True, slots=True)
class OtherLyricEvent:
    code: str
    timestamp: int
    content: str


LyricEvent = (
    PhraseStart
    | PhraseEnd
    | Lyric
    | Section
    | DuetPhraseStart
    | DuetPhraseEnd
    | DuetLyric
    | OtherLyricEvent
)


# Tempo events ([SyncTrack] section)


@dataclass(frozen=True, slots=True)
class Beat:
    timestamp: int
    milli_bpm: int


@dataclass(frozen=True, slots=True)
class TimeSignature:
    timestamp: int
    time_signature: tuple[int, int]

    @property
    def numerator(self) -> int:
        return self.time_signature[0]

    @property
    def denominator(self) -> int:
        return self.time_signature[1]


@dataclass(frozen=True, slots=True)
class Anchor:
    timestamp: int
    song_microseconds: int


@dataclass(frozen=True, slots=True)
class OtherTempoEvent:
    code: str
    timestamp: int
    content: str


TempoEvent = Beat | TimeSignature | Anchor | OtherTempoEvent


# Key presses (one list per difficulty/instrument section)


@dataclass(frozen=True, slots=True)
class Note:
    timestamp: int
    duration: int
    key: int


@dataclass(frozen=True, slots=True)
class Special:
    timestamp: int
    special_type: int
    duration: int


@dataclass(frozen=True, slots=True)
class TextEvent:
    timestamp: int
    content: str


@dataclass(frozen=True, slots=True)
class OtherKeyPress:
    code: str
    timestamp: int
    content: str


KeyPressEvent = Note | Special | TextEvent | OtherKeyPress


@dataclass(frozen=True, slots=True)
class Chart:
    """
    Decoded .chart document.

    Sequences are tuples and mappings are read-only proxies, so a Chart
    can be shared freely once built.
    """

    properties: Mapping[str, str] = field(default_factory=dict)
    lyrics: tuple[LyricEvent, ...] = ()
    tempo_map: tuple[TempoEvent, ...] = ()
    key_presses: Mapping[str, tuple[KeyPressEvent, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))
        object.__setattr__(self, "lyrics", tuple(self.lyrics))
        object.__setattr__(self, "tempo_map", tuple(self.tempo_map))
        object.__setattr__(
            self,
            "key_presses",
            MappingProxyType({name: tuple(events) for name, events in self.key_presses.items()}),
        )

    @property
    def tracks(self) -> list[str]:
        return list(self.key_presses.keys())
