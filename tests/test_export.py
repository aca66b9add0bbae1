from __future__ import annotations

import json

from lyric_charter.chart.decode import decode_chart
from lyric_charter.phrases.export import export_json, export_text
from lyric_charter.phrases.segment import segment_phrases

CHART = """[Song]
{
  Name = Test
}
[SyncTrack]
{
  0 = TS 3 3
}
[Events]
{
  10 = E "phrase_start"
  12 = E "lyric Hel-"
  14 = E "lyric lo"
  16 = E "phrase_end"
  20 = E "duet_phrase_start"
  22 = E "duet_lyric there"
}
[MediumSingle]
{
  10 = N 2 0
}
"""


def test_export_text_main_then_duet():
    col = segment_phrases(decode_chart(CHART).lyrics)
    assert export_text(col) == "Hello\nthere"
    assert export_text(col, line_ending="\r\n") == "Hello\r\nthere"


def test_export_text_with_timestamps():
    col = segment_phrases(decode_chart(CHART).lyrics)
    assert export_text(col, timestamps=True).splitlines() == [
        "from 10 to 16, phrase: Hello",
        "from 20 to 23, phrase: there",
    ]


def test_export_json_structure():
    chart = decode_chart(CHART)
    data = json.loads(export_json(chart, segment_phrases(chart.lyrics)))
    assert data["properties"] == {"Name": "Test"}
    assert data["tempo_map"] == [{"type": "TimeSignature", "timestamp": 0, "time_signature": [3, 8]}]
    assert data["lyrics"][1] == {"type": "Lyric", "timestamp": 12, "text": "Hel-"}
    assert data["key_presses"] == {
        "MediumSingle": [{"type": "Note", "timestamp": 10, "duration": 0, "key": 2}]
    }
    assert data["phrases"]["main"] == [
        {
            "start": 10,
            "end": 16,
            "text": "Hello",
            "lyrics": [{"timestamp": 12, "text": "Hel-"}, {"timestamp": 14, "text": "lo"}],
        }
    ]
    assert [p["text"] for p in data["phrases"]["duet"]] == ["there"]
