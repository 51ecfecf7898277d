"""Console rendering for the allure-upload CLI."""
from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .models import ReportLink, ReportLinkSource, StepResult, StepStatus
from .utils import events


console = Console()

SECRET_KEYS = {"Password"}


def _mask(key: str, value: Any) -> str:
    if value is None or value == "":
        return "-"
    if key in SECRET_KEYS:
        return "***"
    return str(value)


def render_configuration_summary(config: Dict[str, Any], out: Optional[Console] = None) -> None:
    """Render startup configuration summary."""
    target = out or console
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        table.add_row(key, _mask(key, value))

    panel = Panel(
        table,
        title="[bold green]allure-upload[/bold green]",
        subtitle="[dim]Allure results uploader[/dim]",
        border_style="blue",
    )
    target.print(panel)


class StepProgressDisplay:
    """Event-based console timeline for an upload run."""

    PALETTE = {
        "RUN": "cyan",
        "DONE": "green",
        "SKIP": "yellow",
        "FAIL": "red",
        "LINK": "blue",
    }

    def __init__(self, out: Optional[Console] = None):
        self._console = out or console
        self._started: Dict[str, float] = {}
        self.final_link: Optional[ReportLink] = None
        self.steps: List[StepResult] = []

    def attach(self, emitter: events.EventEmitter) -> "StepProgressDisplay":
        emitter.on(events.STEP_START, self.on_step_start)
        emitter.on(events.STEP_COMPLETE, self.on_step_complete)
        emitter.on(events.STEP_SKIP, self.on_step_skip)
        emitter.on(events.STEP_FAIL, self.on_step_fail)
        emitter.on(events.REPORT_LINK, self.on_report_link)
        return self

    def _emit_timeline(self, status: str, name: str, detail: Optional[str] = None) -> None:
        stamp = time.strftime("%H:%M:%S")
        color = self.PALETTE.get(status, "white")
        detail_label = f" [dim]{escape(detail)}[/dim]" if detail else ""
        self._console.print(
            f"[dim]{stamp}[/dim] [{color}]{status:<4}[/{color}] {escape(name)}{detail_label}",
            highlight=False,
        )

    def _elapsed(self, name: str) -> Optional[str]:
        started = self._started.pop(name, None)
        if started is None:
            return None
        return f"{time.monotonic() - started:.2f}s"

    def on_step_start(self, name: str) -> None:
        self._started[name] = time.monotonic()
        self._emit_timeline("RUN", name)

    def on_step_complete(self, result: StepResult) -> None:
        self.steps.append(result)
        elapsed = self._elapsed(result.name)
        parts = [p for p in (result.detail, elapsed) if p]
        self._emit_timeline("DONE", result.name, " ".join(parts) or None)

    def on_step_skip(self, result: StepResult) -> None:
        self.steps.append(result)
        self._emit_timeline("SKIP", result.name, result.detail)

    def on_step_fail(self, result: StepResult) -> None:
        self.steps.append(result)
        self._started.pop(result.name, None)
        self._emit_timeline("FAIL", result.name, result.detail)

    def on_report_link(self, link: ReportLink) -> None:
        self.final_link = link
        label = "generated" if link.source == ReportLinkSource.GENERATED else "predicted"
        self._emit_timeline("LINK", label, link.url)

    def on_finish(self) -> None:
        """Print the per-step summary table and the final report link."""
        table = Table(title="Upload summary", show_lines=False)
        table.add_column("Step", style="bold")
        table.add_column("Status")
        table.add_column("Detail", overflow="fold")
        colors = {
            StepStatus.SUCCEEDED: "green",
            StepStatus.SKIPPED: "yellow",
            StepStatus.FAILED: "red",
        }
        for step in self.steps:
            color = colors[step.status]
            table.add_row(step.name, f"[{color}]{step.status.value}[/{color}]", escape(step.detail or ""))
        self._console.print(table)
        if self.final_link is not None:
            self._console.print(f"[bold green]Allure Report:[/bold green] {self.final_link.url}")
