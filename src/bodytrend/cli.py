"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from rich.console import Console

from bodytrend.config import get_settings
from bodytrend.data.loader import load_cycles, load_entries, load_profile
from bodytrend.export.formatters import JSONFormatter, TableFormatter
from bodytrend.rules.config import (
    load_rule_config,
    merge_rule_config,
    read_rule_document,
    validate_rule_config,
)
from bodytrend.rules.defaults import DEFAULT_RULE_CONFIG
from bodytrend.status.banner import compute_status
from bodytrend.status.insights import build_insights
from bodytrend.tracking.cycles import active_cycle
from bodytrend.tracking.derived import build_derived_series
from bodytrend.tracking.ema import alpha_for_window
from bodytrend.tracking.models import Cycle, DerivedDay
from bodytrend.tracking.weekly import compute_weekly_analysis

app = typer.Typer(
    help="Body-composition trend tracking: EWMA trends, weekly TDEE and status rules",
    no_args_is_help=True,
)
console = Console()

# Subcommand groups
rules_app = typer.Typer(help="Inspect and validate status rule configs")
app.add_typer(rules_app, name="rules")


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2, ensure_ascii=False)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def fail(message: str, json_output: bool) -> None:
    """Report an error and exit with status 1."""
    if json_output:
        output_json({"success": False, "errors": [message]})
    else:
        console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def use_json(json_output: bool) -> bool:
    return json_output or get_settings().defaults.output_format == "json"


def build_series(entries_path: Path, profile_path: Optional[Path], json_output: bool) -> list[DerivedDay]:
    """Load entries and profile and build the derived series."""
    settings = get_settings()
    try:
        entries = load_entries(entries_path)
        profile = load_profile(profile_path)
    except (FileNotFoundError, ValueError) as e:
        fail(str(e), json_output)
    alpha = alpha_for_window(settings.tracking.smoothing_window_days)
    return build_derived_series(entries, profile, alpha=alpha)


def current_cycle(cycles_path: Optional[Path], json_output: bool) -> Optional[Cycle]:
    try:
        cycles = load_cycles(cycles_path)
    except (FileNotFoundError, ValueError) as e:
        fail(str(e), json_output)
    return active_cycle(cycles)


def rule_config(rules_path: Optional[Path], json_output: bool) -> dict[str, Any]:
    path = rules_path or get_settings().rules.override_path
    try:
        return load_rule_config(path)
    except (FileNotFoundError, yaml.YAMLError) as e:
        fail(f"Could not load rule config: {e}", json_output)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Body-composition trend tracking."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ============================================================================
# Analysis Commands
# ============================================================================


@app.command("derived")
def derived_cmd(
    entries_path: Path = typer.Argument(..., help="Entries file (.csv, .json, .yaml)"),
    profile_path: Optional[Path] = typer.Option(None, "--profile", "-p", help="Profile file"),
    last: Optional[int] = typer.Option(None, "--last", "-n", help="Only show the last N days"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the derived series (calories, strength, body fat, EWMA trends)."""
    json_output = use_json(json_output)
    derived = build_series(entries_path, profile_path, json_output)

    if json_output:
        shown = derived[-last:] if last else derived
        print(JSONFormatter().format(
            "derived",
            {"days": [d.to_dict() for d in shown]},
            f"{len(shown)} of {len(derived)} days",
        ))
        return

    if not derived:
        console.print("No entries found")
        return
    TableFormatter(console).derived(derived, limit=last)


@app.command("weekly")
def weekly_cmd(
    entries_path: Path = typer.Argument(..., help="Entries file (.csv, .json, .yaml)"),
    profile_path: Optional[Path] = typer.Option(None, "--profile", "-p", help="Profile file"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show weekly TDEE, adaptation and loss-rate analysis."""
    json_output = use_json(json_output)
    derived = build_series(entries_path, profile_path, json_output)
    analysis = compute_weekly_analysis(derived)

    if json_output:
        if analysis.has_baseline:
            summary = f"{len(analysis.weeks)} weeks, baseline TDEE {analysis.baseline_tdee:.0f} kcal"
        else:
            summary = f"{len(analysis.weeks)} weeks, no baseline yet"
        print(JSONFormatter().format("weekly", analysis.to_dict(), summary))
        return

    TableFormatter(console).weekly(analysis)


@app.command("status")
def status_cmd(
    entries_path: Path = typer.Argument(..., help="Entries file (.csv, .json, .yaml)"),
    profile_path: Optional[Path] = typer.Option(None, "--profile", "-p", help="Profile file"),
    cycles_path: Optional[Path] = typer.Option(None, "--cycles", "-c", help="Cycles file"),
    rules_path: Optional[Path] = typer.Option(None, "--rules", "-r", help="Rule override file"),
    range_days: Optional[int] = typer.Option(
        None, "--range-days", min=1, help="Comparison window in days (default from settings)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Evaluate the status rules against the current trends."""
    json_output = use_json(json_output)
    derived = build_series(entries_path, profile_path, json_output)
    cycle = current_cycle(cycles_path, json_output)
    config = rule_config(rules_path, json_output)
    if range_days is None:
        range_days = get_settings().tracking.status_range_days

    report = compute_status(
        derived,
        compute_weekly_analysis(derived),
        cycle,
        config=config,
        range_days=range_days,
    )

    if json_output:
        status = report.status
        print(JSONFormatter().format(
            "status",
            report.to_dict(),
            f"{status.emoji} {status.title} ({status.level})",
        ))
        return

    TableFormatter(console).status(report)


@app.command("insights")
def insights_cmd(
    entries_path: Path = typer.Argument(..., help="Entries file (.csv, .json, .yaml)"),
    profile_path: Optional[Path] = typer.Option(None, "--profile", "-p", help="Profile file"),
    cycles_path: Optional[Path] = typer.Option(None, "--cycles", "-c", help="Cycles file"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show actionable insights for the latest week."""
    json_output = use_json(json_output)
    derived = build_series(entries_path, profile_path, json_output)
    cycle = current_cycle(cycles_path, json_output)
    insights = build_insights(derived, compute_weekly_analysis(derived), cycle)

    if json_output:
        print(JSONFormatter().format(
            "insights",
            {"insights": [i.to_dict() for i in insights]},
            f"{len(insights)} insights",
        ))
        return

    TableFormatter(console).insights(insights)


# ============================================================================
# Rule Config Commands
# ============================================================================


@rules_app.command("validate")
def rules_validate(
    path: Path = typer.Argument(..., help="Rule override file (.yaml or .json)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Validate a rule override merged over the built-in defaults."""
    if not path.exists():
        fail(f"Rule config not found: {path}", json_output)
    try:
        document = read_rule_document(path)
    except yaml.YAMLError as e:
        fail(f"Could not parse {path}: {e}", json_output)

    if document is not None and not isinstance(document, dict):
        errors = ["Config must be an object."]
    else:
        errors = validate_rule_config(merge_rule_config(document))

    if json_output:
        output_json({
            "success": not errors,
            "command": "rules validate",
            "errors": errors,
            "human_summary": "Config is valid" if not errors else f"{len(errors)} problem(s) found",
        })
    elif errors:
        console.print(f"[red]{len(errors)} problem(s) in {path}:[/red]")
        for error in errors:
            console.print(f"  [red]-[/red] {error}")
    else:
        console.print(f"[green]{path} is valid[/green]")

    if errors:
        raise typer.Exit(1)


@rules_app.command("show-default")
def rules_show_default(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON instead of YAML"),
) -> None:
    """Print the built-in rule config (a starting point for overrides)."""
    if json_output:
        output_json(DEFAULT_RULE_CONFIG)
    else:
        print(yaml.safe_dump(DEFAULT_RULE_CONFIG, allow_unicode=True, sort_keys=False))


if __name__ == "__main__":
    app()
