from __future__ import annotations

import codecs
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_LINE_ENDINGS = {"crlf": "\r\n", "lf": "\n"}


def _config_dir() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "lyric-charter"
    return Path.home() / ".config" / "lyric-charter"


@dataclass(frozen=True)
class AppConfig:
    config_dir: Path

    # Output
    default_output: Path
    line_ending: str  # "crlf" | "lf"
    timestamps: bool  # write "from X to Y, phrase: ..." instead of bare lines

    # Input
    encoding: str

    @property
    def newline(self) -> str:
        return _LINE_ENDINGS[self.line_ending]


def _load_file(config_dir: Path) -> dict[str, Any]:
    cfg_path = config_dir / "config.json"
    if not cfg_path.exists():
        return {}
    try:
        data = json.loads(cfg_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config %s: %s", cfg_path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: expected a JSON object", cfg_path)
        return {}
    return data


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip() not in ("", "0", "false", "False", "no")


def _str_setting(data: dict[str, Any], key: str, env: str, default: str) -> str:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        logger.warning("Ignoring non-string %s %r in config.json", key, value)
        value = None
    return value or os.getenv(env, default)


def load_config() -> AppConfig:
    # Priority: config.json -> LYRIC_CHARTER_* env -> defaults
    config_dir = _config_dir()
    data = _load_file(config_dir)

    default_output = _str_setting(data, "default_output", "LYRIC_CHARTER_OUTPUT", "phrases.txt")
    encoding = _str_setting(data, "encoding", "LYRIC_CHARTER_ENCODING", "utf-8-sig")
    try:
        codecs.lookup(encoding)
    except LookupError:
        logger.warning("Unknown encoding %r, using utf-8-sig", encoding)
        encoding = "utf-8-sig"

    line_ending = _str_setting(data, "line_ending", "LYRIC_CHARTER_LINE_ENDING", "crlf").lower()
    if line_ending not in _LINE_ENDINGS:
        logger.warning("Unknown line ending %r, using crlf", line_ending)
        line_ending = "crlf"

    if "timestamps" in data:
        timestamps = _flag(data["timestamps"])
    else:
        timestamps = _flag(os.getenv("LYRIC_CHARTER_TIMESTAMPS", "0"))

    return AppConfig(
        config_dir=config_dir,
        default_output=Path(default_output),
        line_ending=line_ending,
        timestamps=timestamps,
        encoding=encoding,
    )
