from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

from lyric_charter.chart.model import Chart

from .model import LyricPhraseCollection, Phrase


def export_text(
    collection: LyricPhraseCollection,
    *,
    timestamps: bool = False,
    line_ending: str = "\n",
) -> str:
    """Main phrases then duet phrases, one rendered phrase per line."""
    return line_ending.join(collection.render_lines(timestamps=timestamps))


def _event_dict(event: Any) -> dict[str, Any]:
    # dataclass fields plus the variant name, e.g. {"type": "Note", "timestamp": 0, ...}
    return {"type": type(event).__name__, **asdict(event)}


def _phrase_dict(p: Phrase) -> dict[str, Any]:
    return {
        "start": p.start_timestamp,
        "end": p.end_timestamp,
        "text": p.render(),
        "lyrics": [{"timestamp": ly.timestamp, "text": ly.text} for ly in p.lyrics],
    }


def export_json(chart: Chart, collection: LyricPhraseCollection) -> str:
    return json.dumps(
        {
            "properties": dict(chart.properties),
            "tempo_map": [_event_dict(e) for e in chart.tempo_map],
            "lyrics": [_event_dict(e) for e in chart.lyrics],
            "key_presses": {
                name: [_event_dict(e) for e in events] for name, events in chart.key_presses.items()
            },
            "phrases": {
                "main": [_phrase_dict(p) for p in collection.main_phrases],
                "duet": [_phrase_dict(p) for p in collection.duet_phrases],
            },
        },
        ensure_ascii=False,
        indent=2,
    )
