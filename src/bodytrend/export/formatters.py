"""Output formatters for derived series, weekly analysis, status and insights."""

from __future__ import annotations

import json
import math
from typing import Any, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from bodytrend.status.banner import StatusReport
from bodytrend.status.insights import Insight
from bodytrend.tracking.models import DerivedDay, WeeklyAnalysis

LEVEL_COLORS = {
    "green": "green",
    "yellow": "yellow",
    "red": "red",
    "gray": "dim",
    "good": "green",
    "warn": "yellow",
    "bad": "red",
    "info": "cyan",
}


def fmt(value: Optional[float], decimals: int = 1, signed: bool = False) -> str:
    """Format a number for a table cell ("-" when missing)."""
    if value is None or (isinstance(value, float) and not math.isfinite(value)):
        return "-"
    return f"{value:+.{decimals}f}" if signed else f"{value:.{decimals}f}"


class TableFormatter:
    """Format results as Rich tables for terminal display."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the formatter.

        Args:
            console: Rich console for output. If None, creates a new one.
        """
        self.console = console or Console()

    def derived(self, days: Sequence[DerivedDay], limit: Optional[int] = None) -> None:
        """Print the derived series (most recent `limit` days)."""
        shown = list(days)[-limit:] if limit else list(days)
        table = Table(title=f"Derived Series ({len(shown)} of {len(days)} days)")
        table.add_column("Date", style="cyan")
        table.add_column("Weight", justify="right")
        table.add_column("Trend", justify="right", style="blue")
        table.add_column("kcal", justify="right")
        table.add_column("kcal EWMA", justify="right", style="blue")
        table.add_column("Strength", justify="right")
        table.add_column("Str EWMA", justify="right", style="blue")
        table.add_column("BF %", justify="right")
        table.add_column("LBM", justify="right")

        for day in shown:
            table.add_row(
                day.date_iso,
                fmt(day.weight),
                fmt(day.smoothed.weight, 2),
                fmt(day.calories, 0),
                fmt(day.smoothed.calories, 0),
                fmt(day.avg_strength),
                fmt(day.smoothed.avg_strength),
                fmt(day.bf_pct),
                fmt(day.lbm),
            )

        self.console.print(table)

    def weekly(self, analysis: WeeklyAnalysis) -> None:
        """Print the weekly TDEE table and baselines."""
        if not analysis.weeks:
            self.console.print("[yellow]Need at least 14 days of entries for weekly analysis[/yellow]")
            return

        table = Table(title="Weekly Analysis")
        table.add_column("Week", justify="right", style="cyan")
        table.add_column("Avg kcal", justify="right")
        table.add_column("Δ Weight", justify="right")
        table.add_column("TDEE", justify="right", style="green")
        table.add_column("Δ Baseline", justify="right")
        table.add_column("Adapt %", justify="right")
        table.add_column("Strength", justify="right")
        table.add_column("Loss %LBM", justify="right")
        table.add_column("Rate", justify="center")

        for week in analysis.weeks:
            table.add_row(
                str(week.week_index),
                fmt(week.avg_calories, 0),
                fmt(week.weight_change_kg, 2, signed=True),
                fmt(week.tdee, 0),
                fmt(week.tdee_change_from_baseline, 0, signed=True),
                fmt(week.adaptation_pct, 1, signed=True),
                fmt(week.avg_strength_smoothed),
                fmt(week.loss_rate_pct, 2),
                week.loss_rate_status or "-",
            )

        self.console.print(table)
        self.console.print(
            f"[dim]Baseline TDEE: {fmt(analysis.baseline_tdee, 0)} kcal | "
            f"Baseline strength: {fmt(analysis.baseline_strength)} kg | "
            f"Baseline weekly loss: {fmt(analysis.baseline_weekly_loss, 2)} kg[/dim]"
        )

    def status(self, report: StatusReport) -> None:
        """Print the status banner with trends and goal progress."""
        status = report.status
        color = LEVEL_COLORS.get(status.level, "white")
        lines = [f"[bold]{status.emoji} {status.title}[/bold]", "", status.message]

        if status.warnings:
            lines.append("")
            lines.extend(f"[yellow]! {w}[/yellow]" for w in status.warnings)
        if status.notes:
            lines.append("")
            lines.extend(f"[dim]- {n}[/dim]" for n in status.notes)

        self.console.print(Panel("\n".join(lines), title="Status", border_style=color))

        ctx = report.context
        if not ctx:
            return

        table = Table(title=f"Trends (last {report.range_days} vs previous {report.range_days} days)")
        table.add_column("Signal")
        table.add_column("Trend", justify="center")
        table.add_column("Change", justify="right")
        for label, key, unit in (
            ("Weight", "weightTrend", "kg/wk"),
            ("Body fat", "bfTrend", "pts"),
            ("Strength", "strengthTrend", "%"),
        ):
            trend = ctx.get(key) or {}
            table.add_row(
                label,
                f"{trend.get('sym', '-')} {trend.get('label', 'Unknown')}",
                f"{fmt(trend.get('value'), 2, signed=True)} {unit}",
            )
        self.console.print(table)

        cycle = ctx.get("cycle")
        self.console.print(f"Cycle: [cyan]{cycle.upper() if cycle else 'NO CYCLE'}[/cyan]")
        progress = report.goal_progress
        if progress:
            self.console.print(
                f"Goal progress: {fmt(progress['progress'])} / {fmt(progress['totalNeeded'])} kg "
                f"([green]{fmt(progress['pct'], 0)}%[/green])"
            )

    def insights(self, insights: Sequence[Insight]) -> None:
        """Print insight cards as a table."""
        if not insights:
            self.console.print("No insights yet")
            return

        table = Table(title="Insights")
        table.add_column("", justify="center")
        table.add_column("Insight", style="bold")
        table.add_column("Details", max_width=70)

        for insight in insights:
            color = LEVEL_COLORS.get(insight.level, "white")
            details = insight.message
            if insight.action:
                details += f"\n[italic]{insight.action}[/italic]"
            table.add_row(f"[{color}]{insight.level.upper()}[/{color}]", insight.title, details)

        self.console.print(table)


def _json_safe(value: Any) -> Any:
    """Replace non-finite floats with None so the output is strict JSON."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


class JSONFormatter:
    """Format results as JSON for programmatic use."""

    def format(self, command: str, data: Any, human_summary: str = "") -> str:
        """Return the JSON envelope used by every command.

        Args:
            command: Command name, e.g. "status"
            data: JSON-serializable payload
            human_summary: One-line description of the result

        Returns:
            JSON string
        """
        envelope = {
            "success": True,
            "command": command,
            "data": _json_safe(data),
            "human_summary": human_summary,
        }
        return json.dumps(envelope, indent=2, ensure_ascii=False)
