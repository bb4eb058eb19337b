from __future__ import annotations

import dataclasses
import json
import logging
import random
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from goaltrack_core.domain.errors import GoalInputError
from goaltrack_core.domain.models import NotificationPreferences, ProjectionInput, WarningThresholds
from goaltrack_core.io import config as config_io
from goaltrack_core.io import history as history_io
from goaltrack_core.io import ledger as ledger_io
from goaltrack_core.io.dates import resolve_today
from goaltrack_core.services import debt as debt_service
from goaltrack_core.services import formatting, history, notifications, progress, projection, scenarios

app = typer.Typer(help="Savings goal progress, projections and notifications.")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log calculation details")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _save_json(path: Path, payload):
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=formatting.to_iso, ensure_ascii=False)


def _emit(payload, out: Optional[Path], label: str) -> None:
    if out:
        _save_json(out, payload)
        typer.echo(f"{label} written to {out}")
    else:
        typer.echo(json.dumps(payload, indent=2, default=formatting.to_iso, ensure_ascii=False))


def _money(value: Optional[float]) -> str:
    return formatting.format_currency(value) if value is not None else "-"


@app.command("progress")
def progress_command(
    current: float = typer.Option(..., help="Current envelope balance"),
    target: float = typer.Option(..., help="Savings target amount"),
    target_date: Optional[str] = typer.Option(None, help="Target date (YYYY-MM-DD)"),
    start_date: Optional[str] = typer.Option(None, help="Date the goal was started (YYYY-MM-DD)"),
    today: Optional[str] = typer.Option(None, help="Evaluate as of this date instead of today"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    out: Optional[Path] = typer.Option(None, help="Write progress JSON to this path"),
):
    """Show progress of a savings goal."""
    try:
        result = progress.calculate_progress(current, target, target_date, start_date, today=today)
    except GoalInputError as exc:
        raise typer.BadParameter(str(exc)) from exc

    milestones = progress.calculate_milestones(result)
    if as_json or out:
        payload = dataclasses.asdict(result)
        payload["status_color"] = progress.get_progress_status_color(result)
        payload["status_text"] = progress.get_progress_status_text(result)
        payload["milestones"] = [dataclasses.asdict(m) for m in milestones]
        _emit(payload, out, "Progress")
        return

    color = progress.get_progress_status_color(result)
    table = Table(title=f"[{color}]{progress.get_progress_status_text(result)}[/{color}]")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Progress", formatting.format_progress_percentage(result.progress_percentage))
    table.add_row("Saved", _money(result.current_amount))
    table.add_row("Remaining", _money(result.remaining_amount))
    if result.days_remaining is not None:
        table.add_row("Deadline", formatting.format_days_remaining(result.days_remaining))
    if result.time_progress_percentage is not None:
        table.add_row("Time elapsed", formatting.format_progress_percentage(result.time_progress_percentage))
    if result.monthly_target_amount is not None:
        table.add_row("Needed per month", _money(result.monthly_target_amount))
    if result.projected_completion_date is not None:
        table.add_row("Projected completion", formatting.format_date(result.projected_completion_date))
    reached = [f"{m.percentage}%" for m in milestones if m.achieved]
    table.add_row("Milestones", ", ".join(reached) or "-")
    console.print(table)


@app.command()
def project(
    current: float = typer.Option(..., help="Current envelope balance"),
    target: float = typer.Option(..., help="Savings target amount"),
    target_date: Optional[str] = typer.Option(None, help="Target date (YYYY-MM-DD)"),
    monthly_contribution: float = typer.Option(0.0, help="Assumed steady monthly contribution"),
    today: Optional[str] = typer.Option(None, help="Evaluate as of this date instead of today"),
    out: Optional[Path] = typer.Option(None, help="Write projection JSON to this path"),
):
    """Project the balance at the target date and the contributions needed."""
    try:
        inputs = ProjectionInput.create(current, target, target_date, monthly_contribution=monthly_contribution)
        result = projection.calculate_projection(inputs, today=today)
    except GoalInputError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _emit(dataclasses.asdict(result), out, "Projection")


@app.command("what-if")
def what_if(
    current: float = typer.Option(..., help="Current envelope balance"),
    target: float = typer.Option(..., help="Savings target amount"),
    target_date: str = typer.Option(..., help="Target date (YYYY-MM-DD)"),
    contribution: List[float] = typer.Option(..., help="Monthly contribution to compare (repeatable)"),
    today: Optional[str] = typer.Option(None, help="Evaluate as of this date instead of today"),
):
    """Compare several monthly contributions against the same goal."""
    try:
        results = projection.calculate_what_if_scenarios(current, target, target_date, contribution, today=today)
    except GoalInputError as exc:
        raise typer.BadParameter(str(exc)) from exc

    table = Table(title="What if I saved...")
    table.add_column("Monthly", justify="right")
    table.add_column("Months to goal", justify="right")
    table.add_column("Completion")
    table.add_column("On time")
    table.add_column("Shortfall / surplus", justify="right")
    for item in results:
        gap = f"-{_money(item.shortfall)}" if item.shortfall else f"+{_money(item.surplus or 0.0)}"
        table.add_row(
            _money(item.monthly_contribution),
            str(item.months_to_complete) if item.months_to_complete is not None else "never",
            formatting.format_date(item.projected_completion_date) if item.projected_completion_date else "-",
            "[green]yes[/green]" if item.will_meet_target else "[red]no[/red]",
            gap,
        )
    console.print(table)


@app.command()
def notify(
    goal_name: str = typer.Option(..., help="Goal display name"),
    goal_id: str = typer.Option(..., help="Goal identifier"),
    previous_amount: Optional[float] = typer.Option(None, help="Balance at the previous check"),
    current: float = typer.Option(..., help="Current envelope balance"),
    target: float = typer.Option(..., help="Savings target amount"),
    target_date: Optional[str] = typer.Option(None, help="Target date (YYYY-MM-DD)"),
    start_date: Optional[str] = typer.Option(None, help="Date the goal was started (YYYY-MM-DD)"),
    preferences: Optional[Path] = typer.Option(None, help="Notification preferences JSON"),
    thresholds: Optional[Path] = typer.Option(None, help="Warning thresholds JSON"),
    seed: Optional[int] = typer.Option(None, help="Seed for message selection"),
    today: Optional[str] = typer.Option(None, help="Evaluate as of this date instead of today"),
    history_out: Optional[Path] = typer.Option(None, help="Append-ready CSV of history entries to write"),
):
    """Emit achievement, milestone and warning notifications for a balance change."""
    prefs = config_io.load_notification_preferences(preferences) if preferences else NotificationPreferences()
    limits = config_io.load_warning_thresholds(thresholds) if thresholds else WarningThresholds()
    try:
        now = resolve_today(today)
        current_result = progress.calculate_progress(current, target, target_date, start_date, today=now)
        previous_result = None
        if previous_amount is not None:
            previous_result = progress.calculate_progress(previous_amount, target, target_date, start_date, today=now)
    except GoalInputError as exc:
        raise typer.BadParameter(str(exc)) from exc

    events = notifications.check_goal_achievements(
        current_result,
        previous_result,
        goal_name,
        goal_id,
        prefs,
        thresholds=limits,
        rng=random.Random(seed) if seed is not None else None,
    )
    if history_out:
        entries = history.entries_from_notifications(events, current_result)
        history_io.save_goal_history(entries, history_out)

    if not events:
        typer.echo("No notifications.")
        return
    for event in events:
        console.print(f"{event.icon} [bold {event.color}]{event.title}[/bold {event.color}] {event.message}")
    summary = notifications.summarize_notifications(events)
    typer.echo(json.dumps(summary))


@app.command()
def advise(
    ledger: Path = typer.Option(..., help="CSV of contributions with date,amount,kind"),
    envelope: Optional[str] = typer.Option(None, help="Only use ledger rows for this envelope_id"),
    current: float = typer.Option(..., help="Current envelope balance"),
    target: float = typer.Option(..., help="Savings target amount"),
    target_date: Optional[str] = typer.Option(None, help="Target date (YYYY-MM-DD)"),
    today: Optional[str] = typer.Option(None, help="Evaluate as of this date instead of today"),
    out: Optional[Path] = typer.Option(None, help="Write the projection JSON to this path"),
):
    """Scenario projections and advice from past contributions."""
    contributions = ledger_io.load_contributions(ledger, envelope)
    try:
        result = scenarios.calculate_advanced_projection(current, target, target_date, contributions, today=today)
    except GoalInputError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if out:
        _emit(dataclasses.asdict(result), out, "Advice")
        return

    table = Table(title="Scenarios")
    table.add_column("Scenario")
    table.add_column("Monthly", justify="right")
    table.add_column("Completion")
    table.add_column("Confidence", justify="right")
    for name in ("conservative", "realistic", "optimistic"):
        data = getattr(result.scenarios, name)
        table.add_row(
            name,
            _money(data.monthly_contribution),
            formatting.format_date(data.projected_completion_date),
            formatting.format_progress_percentage(data.confidence),
        )
    console.print(table)
    for title, items, style in (
        ("Recommendations", result.recommendations, "cyan"),
        ("Risks", result.risk_factors, "yellow"),
        ("Confidence", result.confidence_factors, "green"),
    ):
        if items:
            console.print(f"[bold {style}]{title}[/bold {style}]")
            for item in items:
                console.print(f"  - {item}")


@app.command()
def debt(
    balance: float = typer.Option(..., help="Amount still owed"),
    apr: float = typer.Option(..., help="Annual percentage rate, e.g. 19.9"),
    payment: float = typer.Option(..., help="Minimum monthly payment"),
    months: Optional[int] = typer.Option(None, help="Also show the payment that clears the debt in this many months"),
    ledger: Optional[Path] = typer.Option(None, help="CSV of payments with date,amount,kind"),
    envelope: Optional[str] = typer.Option(None, help="Only use ledger rows for this envelope_id"),
    schedule: int = typer.Option(0, help="Number of scheduled payments to include"),
    today: Optional[str] = typer.Option(None, help="Evaluate as of this date instead of today"),
    out: Optional[Path] = typer.Option(None, help="Write the payoff plan JSON to this path"),
):
    """Payoff projection and strategy comparison for a debt envelope."""
    try:
        now = resolve_today(today)
        projection_result = debt_service.calculate_debt_payoff_projection(balance, apr, payment, today=now)
        strategies = debt_service.compare_debt_strategies(balance, apr, payment, today=now)
        rows = debt_service.generate_debt_payment_schedule(balance, apr, payment, schedule, today=now)
        required = debt_service.calculate_required_payment(balance, apr, months) if months else None
    except GoalInputError as exc:
        raise typer.BadParameter(str(exc)) from exc

    payments = ledger_io.load_contributions(ledger, envelope) if ledger else []
    payload = {
        "projection": dataclasses.asdict(projection_result),
        "strategies": [dataclasses.asdict(s) for s in strategies],
        "schedule": [dataclasses.asdict(r) for r in rows],
        "required_payment": required,
    }
    if ledger:
        payload["progress"] = dataclasses.asdict(debt_service.calculate_debt_progress(balance, payments))
        payload["payment_overdue"] = debt_service.is_payment_overdue(payment, payments, today=now)
    if out:
        _emit(payload, out, "Payoff plan")
        return

    if projection_result.is_payable:
        duration = formatting.format_duration(projection_result.months_to_payoff)
        console.print(f"Paid off in {duration} at {_money(payment)}/month")
    else:
        console.print(f"[red]{_money(payment)}/month never covers the interest[/red]")
    if required is not None:
        console.print(f"Needed to clear it in {months} months: {_money(required)}/month")
    if ledger and payload["payment_overdue"]:
        console.print("[red]Payment overdue[/red]")
    table = Table(title="Strategies")
    table.add_column("Strategy")
    table.add_column("Monthly", justify="right")
    table.add_column("Time to payoff")
    table.add_column("Interest", justify="right")
    table.add_column("Interest saved", justify="right")
    for item in strategies:
        table.add_row(
            item.name,
            _money(item.monthly_payment),
            formatting.format_duration(item.months_to_payoff),
            _money(item.total_interest_paid),
            _money(item.interest_saved),
        )
    console.print(table)


@app.command("history")
def history_command(
    history_csv: Path = typer.Option(..., "--history", help="Goal history CSV export"),
    since: Optional[str] = typer.Option(None, help="Only show events on or after this date"),
):
    """Show a goal's history timeline and statistics."""
    entries = history_io.load_goal_history(history_csv)
    try:
        timeline = history.progress_timeline(entries, since=since)
    except GoalInputError as exc:
        raise typer.BadParameter(str(exc)) from exc

    table = Table(title="Goal history")
    table.add_column("Date")
    table.add_column("Event")
    table.add_column("Details")
    table.add_column("Progress", justify="right")
    for entry in timeline:
        shown = history.format_history_entry(entry)
        table.add_row(
            formatting.format_date(entry.event_date),
            f"{shown.icon} [{shown.color}]{shown.title}[/{shown.color}]",
            shown.description,
            formatting.format_progress_percentage(entry.progress_percentage),
        )
    console.print(table)

    stats = history.calculate_goal_statistics(entries)
    typer.echo(
        json.dumps(
            {
                "total_days": stats.total_days,
                "average_progress_per_day": stats.average_progress_per_day,
                "milestones": {str(k): v for k, v in sorted(stats.milestone_dates.items())},
                "completion_date": stats.completion_date,
                "modification_count": stats.modification_count,
            },
            indent=2,
            default=formatting.to_iso,
        )
    )


if __name__ == "__main__":
    app()
