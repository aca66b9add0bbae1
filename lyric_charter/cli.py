from __future__ import annotations

import logging
from pathlib import Path

import typer

from lyric_charter.chart.decode import ChartDecodeError, decode_chart
from lyric_charter.chart.model import Chart
from lyric_charter.config import AppConfig, load_config
from lyric_charter.logging_setup import setup_logging
from lyric_charter.phrases.export import export_json, export_text
from lyric_charter.phrases.segment import segment_phrases

logger = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_chart(path: Path, cfg: AppConfig) -> Chart:
    try:
        text = path.read_text(encoding=cfg.encoding)
    except (OSError, UnicodeDecodeError) as e:
        typer.echo(f"Error: cannot read {path}: {e}", err=True)
        raise typer.Exit(code=1)
    try:
        return decode_chart(text)
    except ChartDecodeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def phrases(
    source: Path = typer.Argument(..., help="Source .chart file"),
    dest: Path | None = typer.Argument(None, help="Destination file (default from config)"),
    timestamps: bool = typer.Option(False, "--timestamps", help="Prefix each line with its tick range"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """
    Write the lyric phrases of a chart, main track first, then duet.
    """
    setup_logging(debug)
    cfg = load_config()
    chart = _load_chart(source, cfg)
    collection = segment_phrases(chart.lyrics)

    out = dest or cfg.default_output
    data = export_text(collection, timestamps=timestamps or cfg.timestamps, line_ending=cfg.newline)
    out.write_text(data, encoding="utf-8", newline="")
    logger.info("Wrote %s", out)
    typer.echo(f"main={len(collection.main_phrases)} duet={len(collection.duet_phrases)}")
    typer.echo(f"{len(data.encode('utf-8'))} bytes written to {out}")


@app.command()
def parse(source: Path):
    """Decode a chart and print stats."""
    cfg = load_config()
    chart = _load_chart(source, cfg)
    collection = segment_phrases(chart.lyrics)
    typer.echo(f"properties={len(chart.properties)}")
    typer.echo(f"tempo_events={len(chart.tempo_map)}")
    typer.echo(f"lyric_events={len(chart.lyrics)}")
    for name, events in chart.key_presses.items():
        typer.echo(f"track[{name}]={len(events)}")
    typer.echo(f"main_phrases={len(collection.main_phrases)}")
    typer.echo(f"duet_phrases={len(collection.duet_phrases)}")


@app.command()
def export(
    source: Path,
    fmt: str = typer.Option("text", "--format", case_sensitive=False, help="text|json"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
):
    """Export phrases as text, or the whole chart plus phrases as JSON."""
    cfg = load_config()
    chart = _load_chart(source, cfg)
    collection = segment_phrases(chart.lyrics)

    fmt_l = fmt.lower()
    if fmt_l == "json":
        data = export_json(chart, collection) + "\n"
    elif fmt_l == "text":
        lines = export_text(collection, timestamps=cfg.timestamps, line_ending=cfg.newline)
        data = lines + cfg.newline if lines else ""
    else:
        raise typer.BadParameter("format must be one of: text, json")

    if out:
        out.write_text(data, encoding="utf-8", newline="")
    else:
        typer.echo(data, nl=False)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
