from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PhraseLyric:
    timestamp: int
    text: str


@dataclass(frozen=True, slots=True)
class Phrase:
    start_timestamp: int
    end_timestamp: int
    lyrics: tuple[PhraseLyric, ...] = ()

    def render(self) -> str:
        """
        Join syllables with a space; a trailing "-" glues the syllable to the
        next one ("Hel-", "lo" -> "Hello").
        """
        parts: list[str] = []
        for ly in self.lyrics:
            if ly.text.endswith("-"):
                parts.append(ly.text[:-1])
            else:
                parts.append(ly.text + " ")
        return "".join(parts).removesuffix(" ")

    def __str__(self) -> str:
        return f"from {self.start_timestamp} to {self.end_timestamp}, phrase: {self.render()}"


@dataclass(frozen=True, slots=True)
class LyricPhraseCollection:
    main_phrases: tuple[Phrase, ...] = ()
    duet_phrases: tuple[Phrase, ...] = ()

    def render_lines(self, timestamps: bool = False) -> list[str]:
        phrases = self.main_phrases + self.duet_phrases
        if timestamps:
            return [str(p) for p in phrases]
        return [p.render() for p in phrases]
