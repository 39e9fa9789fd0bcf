from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from cuesync.core.errors import NothingToExportError, OutOfRangeError, ScriptFormatError
from cuesync.core.exporter import EXPORT_MIME_TYPE
from cuesync.core.resolver import sweep_active_cues
from cuesync.core.session import DEFAULT_CUE_DURATION, EditorSession
from cuesync.infra.config import AppConfig, build_app_config
from cuesync.infra.log import build_logger
from cuesync.infra.script import (
    ReplayProgress,
    ReplayResult,
    load_session_script,
    replay_events,
)
from cuesync.infra.storage import write_json
from cuesync.schemas.event import SessionEvent

app = typer.Typer(
    name="cuesync",
    add_completion=False,
    help="Replay caption timing sessions and export SRT subtitles.",
)


def _build_config(
    *,
    output_dir: Path | None = None,
    default_duration: float = DEFAULT_CUE_DURATION,
    log_level: str | None = None,
) -> AppConfig:
    try:
        config = build_app_config(
            default_cue_duration=default_duration,
            output_dir=output_dir,
            log_level=log_level,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    build_logger(config.log_level)
    return config


def _load_script(script_path: Path) -> list[SessionEvent]:
    if not script_path.exists() or not script_path.is_file():
        raise typer.BadParameter(f"Session script not found: {script_path}")
    try:
        return load_session_script(script_path)
    except ScriptFormatError as exc:
        typer.echo(f"[failed] Invalid session script: {exc}")
        raise typer.Exit(code=2) from exc


def _replay_with_progress(
    session: EditorSession, events: list[SessionEvent], *, strict: bool
) -> ReplayResult:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        transient=True,
    ) as progress:
        task_id = progress.add_task(description="Replaying events...", total=len(events))

        def _progress_log(event: ReplayProgress) -> None:
            progress.update(task_id, completed=event.completed)

        return replay_events(session, events, strict=strict, on_progress=_progress_log)


@app.command("replay")
def replay_command(
    script_path: Path = typer.Argument(..., help="Session script (JSON event log)."),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", "-o", help="Directory for subtitles.srt (default: ./outputs)."
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Fail on edits that reference a missing cue position."
    ),
    default_duration: float = typer.Option(
        DEFAULT_CUE_DURATION, "--default-duration", help="Length of newly added cues in seconds."
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="DEBUG|INFO|WARNING|ERROR (default: CUESYNC_LOG_LEVEL or WARNING)."
    ),
) -> None:
    """Replay a session script and export subtitles.srt."""
    config = _build_config(
        output_dir=output_dir, default_duration=default_duration, log_level=log_level
    )
    events = _load_script(script_path)
    session = EditorSession(
        default_duration=config.default_cue_duration,
        export_filename=config.export_filename,
    )
    run_path = config.output_dir / ".cuesync" / "run.json"
    try:
        result = _replay_with_progress(session, events, strict=strict)
        output_path = session.export_to(config.output_dir)
    except OutOfRangeError as exc:
        write_json(
            run_path,
            {"status": "failed", "script_path": str(script_path), "error": str(exc)},
        )
        typer.echo(f"[failed] Stale cue position: {exc}")
        raise typer.Exit(code=2) from exc
    except NothingToExportError as exc:
        write_json(
            run_path,
            {
                "status": "skipped",
                "script_path": str(script_path),
                "events": len(events),
                "cues": 0,
                "message": str(exc),
            },
        )
        typer.echo(f"[skipped] {exc} Export is disabled for an empty session.")
        raise typer.Exit(code=1) from exc
    finally:
        session.close()

    status = "partial" if result.ignored or result.stale else "done"
    write_json(
        run_path,
        {
            "status": status,
            "script_path": str(script_path),
            "output_srt_path": str(output_path),
            "mime_type": EXPORT_MIME_TYPE,
            "events": result.total,
            "applied": result.applied,
            "ignored": result.ignored,
            "stale": result.stale,
            "cues": len(session.store),
            "last_playback_time": result.last_playback_time,
        },
    )
    typer.echo(
        f"[{status}] Subtitle export complete.\n"
        f"- script: {script_path}\n"
        f"- output srt: {output_path}\n"
        f"- run metadata: {run_path}\n"
        f"- events: {result.total} (applied={result.applied} "
        f"ignored={result.ignored} stale={result.stale})\n"
        f"- cues: {len(session.store)}"
    )


@app.command("preview")
def preview_command(
    script_path: Path = typer.Argument(..., help="Session script (JSON event log)."),
    step: float = typer.Option(0.5, "--step", help="Playback sweep interval in seconds."),
    until: float | None = typer.Option(
        None, "--until", help="Sweep end time (default: last cue end)."
    ),
    default_duration: float = typer.Option(
        DEFAULT_CUE_DURATION, "--default-duration", help="Length of newly added cues in seconds."
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="DEBUG|INFO|WARNING|ERROR (default: CUESYNC_LOG_LEVEL or WARNING)."
    ),
) -> None:
    """Show which cue the overlay displays over time, then the SRT text."""
    if step <= 0:
        raise typer.BadParameter(f"step must be > 0, got {step}", param_hint="--step")
    config = _build_config(default_duration=default_duration, log_level=log_level)
    events = _load_script(script_path)
    session = EditorSession(default_duration=config.default_cue_duration)
    try:
        replay_events(session, events)
    finally:
        session.close()

    cues = session.store.list()
    end = until if until is not None else max((cue.end for cue in cues), default=0.0)
    try:
        timeline = sweep_active_cues(cues, step=step, until=end)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--step/--until") from exc
    table = Table(title="Overlay timeline")
    table.add_column("time (s)", justify="right")
    table.add_column("active cue")
    for time, text in timeline:
        table.add_row(f"{time:.3f}", "-" if text is None else text)

    console = Console()
    console.print(table)
    typer.echo(session.export())


def run() -> None:
    """Console-script entrypoint."""
    app()
