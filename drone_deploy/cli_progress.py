"""Console rendering and progress helpers for the drone-deploy CLI."""
from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn
from rich.table import Table

console = Console()

SECRET_KEYS = {"Deploy Key"}


def _echo(message: str) -> None:
    console.print(message)


def _mask(value: str) -> str:
    if not value:
        return "(missing)"
    if len(value) <= 4:
        return "****"
    return f"{value[:2]}****{value[-2:]}"


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        if key in SECRET_KEYS:
            rendered = _mask(rendered if value else "")
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]drone-deploy[/bold green]",
        subtitle="[dim]package drone deploy[/dim]",
        border_style="blue",
    )
    console.print(panel)


def _label(artifact: Any) -> str:
    coordinate = getattr(artifact, "coordinate", None)
    if coordinate is not None:
        return str(coordinate)
    return Path(artifact).name


class DeployProgressDisplay:
    """Event-based console display for a deploy run."""

    def __init__(self):
        self._stats: Dict[str, int] = {
            "uploaded": 0,
            "dropped": 0,
            "skipped": 0,
        }
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold cyan]{task.fields[label]}", justify="left"),
            TextColumn("[dim]{task.fields[detail]}", justify="left"),
            expand=False,
            console=console,
            transient=True,
        )
        self._phase_task_id: Optional[TaskID] = None

    def attach(self, orchestrator: Any) -> None:
        orchestrator.on("phase_start", self.on_phase_start)
        orchestrator.on("phase_complete", self.on_phase_complete)
        orchestrator.on("artifact_skipped", self.on_artifact_skipped)
        orchestrator.on("artifact_start", self.on_artifact_start)
        orchestrator.on("artifact_uploaded", self.on_artifact_uploaded)
        orchestrator.on("artifact_dropped", self.on_artifact_dropped)
        orchestrator.on("error", self.on_error)

    def _emit_timeline(self, status: str, kind: str, name: str, error: Optional[str] = None) -> None:
        stamp = time.strftime("%H:%M:%S")
        palette = {
            "DONE": "green",
            "FAIL": "red",
            "SKIP": "yellow",
            "DROP": "cyan",
            "INFO": "blue",
        }
        color = palette.get(status, "white")
        error_label = f" cause={error}" if error else ""
        _echo(
            f"[dim]{stamp}[/dim] [{color}]{status:<4}[/{color}] "
            f"{kind}: {name}{error_label}"
        )

    def _stop(self) -> None:
        if self._phase_task_id is not None:
            self._progress.remove_task(self._phase_task_id)
            self._phase_task_id = None
        self._progress.stop()

    def on_phase_start(self, phase_name: str, message: str) -> None:
        self._progress.start()
        if self._phase_task_id is not None:
            self._progress.remove_task(self._phase_task_id)
        self._phase_task_id = self._progress.add_task(
            "phase",
            label=f"Phase {phase_name}",
            detail=message,
            total=None,
        )

    def on_phase_complete(self, phase_name: str, message: str) -> None:
        self._stop()
        self._emit_timeline("INFO", "phase", f"{phase_name} done - {message}")

    def on_artifact_skipped(self, file_path: Path) -> None:
        self._stats["skipped"] += 1
        self._emit_timeline("SKIP", "file", f"{Path(file_path).name} (no pom.xml)")

    def on_artifact_start(self, artifact: Any) -> None:
        if self._phase_task_id is not None:
            self._progress.update(
                self._phase_task_id,
                detail=f"{_label(artifact)} via {getattr(artifact, 'filename', '')}",
            )

    def on_artifact_uploaded(self, artifact: Any) -> None:
        self._stats["uploaded"] += 1
        kind = getattr(getattr(artifact, "kind", None), "value", "artifact")
        self._emit_timeline("DONE", kind, _label(artifact))

    def on_artifact_dropped(self, bundle: Any, feature: Any) -> None:
        self._stats["dropped"] += 1
        self._emit_timeline("DROP", "bundle", f"{_label(bundle)} (in {_label(feature)})")

    def on_error(self, phase_name: str, error: Exception) -> None:
        self._stop()
        self._emit_timeline("FAIL", "phase", phase_name, error=str(error))

    def on_finish(self, result: Any) -> None:
        self._stop()
        uploaded = self._stats["uploaded"]
        dropped = self._stats["dropped"]
        skipped = self._stats["skipped"]
        if getattr(result, "success", False):
            _echo(
                f"[bold green]Finished[/bold green] uploaded={uploaded} "
                f"packaged_in_features={dropped} skipped={skipped}"
            )
            return
        error = getattr(result, "error", None)
        _echo(
            f"[bold red]Failed[/bold red] uploaded={uploaded} "
            f"packaged_in_features={dropped} skipped={skipped} error={error}"
        )
