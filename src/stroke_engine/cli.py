"""StrokeEngine CLI: inspect templates and re-run recorded strokes.

Usage:
    stroke-engine templates          List built-in templates and their features
    stroke-engine recognize FILE     Recognize the stroke(s) in a file
    stroke-engine score FILE NAME    Similarity of a stroke to one template
    stroke-engine replay ARCHIVE     Re-run an archive and summarize outcomes

Stroke files are JSON: either a bare list of [x, y] pairs or an archive
written by StrokeRecorder.save().
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Optional

import typer

from stroke_engine.config import EngineConfig
from stroke_engine.features import curvature_in_degrees
from stroke_engine.recorder import StrokeRecorder
from stroke_engine.session import Recognized, RecognitionSession

app = typer.Typer(
    name="stroke-engine",
    help="✍️  Pointer stroke gesture recognition.",
    add_completion=False,
)


def _make_session(config: Optional[str], log_level: str) -> RecognitionSession:
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    if config:
        if not Path(config).exists():
            typer.echo(f"❌ Config not found: {config}", err=True)
            raise typer.Exit(1)
        cfg = EngineConfig.from_yaml(config)
    else:
        cfg = EngineConfig()
    # one-shot runs; nothing to archive
    cfg = cfg.replace(archive_size=0)
    return RecognitionSession(config=cfg)


def _load_strokes(path: str) -> StrokeRecorder:
    if not Path(path).exists():
        typer.echo(f"❌ Stroke file not found: {path}", err=True)
        raise typer.Exit(1)
    return StrokeRecorder.load(path)


def _result_dict(result) -> dict:
    if isinstance(result, Recognized):
        return {
            "recognized": True,
            "template": result.template.name,
            "confidence": round(result.confidence, 4),
        }
    return {
        "recognized": False,
        "reason": result.reason.value,
        "best_candidate": result.best_candidate.name if result.best_candidate else None,
        "best_score": round(result.best_score, 4),
        "detail": result.detail,
    }


@app.command()
def templates(
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    config: Optional[str] = typer.Option(None, help="Path to engine config YAML"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """List registered templates with their key features."""
    session = _make_session(config, log_level)
    items = session.registry.list_all()

    if as_json:
        typer.echo(json.dumps([
            {**t.summary().to_dict(), "features": t.features.to_dict()} for t in items
        ], indent=2))
        return

    typer.echo(f"{'name':<18}{'shape':<10}{'pts':>5}{'len':>8}{'turns':>7}{'aspect':>8}  flags")
    for t in items:
        f = t.features
        flags = ",".join(name for name, on in (
            ("closed", f.is_closed), ("linear", f.is_linear), ("circular", f.is_circular),
        ) if on)
        typer.echo(
            f"{t.name:<18}{t.shape.value:<10}{f.point_count:>5}{f.total_length:>8.1f}"
            f"{f.direction_change_count:>7}{f.aspect_ratio:>8.2f}  {flags or '-'}"
        )


@app.command()
def recognize(
    stroke_file: str = typer.Argument(..., help="JSON stroke file or archive"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON results"),
    config: Optional[str] = typer.Option(None, help="Path to engine config YAML"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Recognize every stroke in a file."""
    session = _make_session(config, log_level)
    archive = _load_strokes(stroke_file)

    results = [session.recognize(stroke.points) for stroke in archive]
    if as_json:
        typer.echo(json.dumps([_result_dict(r) for r in results], indent=2))
        return

    for i, result in enumerate(results):
        if isinstance(result, Recognized):
            avg, peak = curvature_in_degrees(result.features)
            typer.echo(
                f"✅ #{i}: {result.template.name} ({result.confidence:.2f}) "
                f"curvature avg={avg:.0f}° max={peak:.0f}°"
            )
        else:
            best = result.best_candidate.name if result.best_candidate else "-"
            typer.echo(f"❌ #{i}: {result.reason.value} (best={best}, {result.best_score:.2f})")


@app.command()
def score(
    stroke_file: str = typer.Argument(..., help="JSON stroke file or archive"),
    template: str = typer.Argument(..., help="Template name"),
    config: Optional[str] = typer.Option(None, help="Path to engine config YAML"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Print the similarity of each stroke to one template."""
    session = _make_session(config, log_level)
    if template not in session.registry:
        typer.echo(f"❌ Unknown template: {template}", err=True)
        raise typer.Exit(1)

    for i, stroke in enumerate(_load_strokes(stroke_file)):
        typer.echo(f"#{i}: {template} {session.test_match(stroke.points, template):.4f}")


@app.command()
def replay(
    archive_file: str = typer.Argument(..., help="Archive written by StrokeRecorder"),
    config: Optional[str] = typer.Option(None, help="Path to engine config YAML"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Re-run an archive and compare against the recorded outcomes."""
    session = _make_session(config, log_level)
    archive = _load_strokes(archive_file)

    outcomes: Counter = Counter()
    changed = 0
    for stroke in archive:
        result = session.recognize(stroke.points)
        outcome = result.template.name if isinstance(result, Recognized) else result.reason.value
        outcomes[outcome] += 1
        if stroke.outcome is not None and stroke.outcome != outcome:
            changed += 1

    typer.echo(f"📼 Replayed {archive.stroke_count} strokes")
    for outcome, count in outcomes.most_common():
        typer.echo(f"   {outcome:<18}{count:>5}")
    if changed:
        typer.echo(f"⚠️  {changed} stroke(s) changed outcome since recording")


def main():
    app()


if __name__ == "__main__":
    main()
