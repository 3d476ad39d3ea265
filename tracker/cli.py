"""
Outcome Tracker - Command Line Interface
CLI for managing outcomes, outputs, daily action logs and skills
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from tracker.core.config import Config
from tracker.core.database import InMemoryDatabase, RowStore, get_database
from tracker.core.dates import add_local_days, format_local_date, week_start_for
from tracker.core.models import FREQUENCY_TYPES
from tracker.core.schema import init_database
from tracker.dashboard.aggregator import DashboardAggregator
from tracker.dashboard.formatter import DashboardFormatter, outcome_title_map
from tracker.dashboard.workflows import (
    SkillLogDraft,
    build_selected_skill_entries,
    frequency_description,
    run_graduation_prompt_flow,
)
from tracker.services.action_logs import ActionLogService
from tracker.services.outcomes import OutcomeService
from tracker.skills.service import SkillService

app = typer.Typer(help="Outcome Tracker - outcomes, daily outputs and skill practice")
outcome_app = typer.Typer(help="Outcome management")
output_app = typer.Typer(help="Recurring output management")
skill_app = typer.Typer(help="Skill management and practice queue")
app.add_typer(outcome_app, name="outcome")
app.add_typer(output_app, name="output")
app.add_typer(skill_app, name="skill")

console = Console()

HANDLED_ERRORS = (ValueError, LookupError, FileNotFoundError)


@dataclass
class AppContext:
    """Store and configuration shared by every command in one invocation."""
    db: RowStore
    config: Config

    @property
    def outcomes(self) -> OutcomeService:
        return OutcomeService(self.db, self.config)

    @property
    def skills(self) -> SkillService:
        return SkillService(self.db, self.config)

    @property
    def action_logs(self) -> ActionLogService:
        return ActionLogService(self.db, self.config)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log service activity"),
    config_dir: Optional[Path] = typer.Option(None, "--config-dir", help="Configuration directory"),
):
    """Set up logging, configuration and the row store."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if ctx.obj is not None:
        # Pre-built context (tests)
        return

    config = Config(config_dir)
    if ctx.invoked_subcommand == "init":
        ctx.obj = AppContext(db=InMemoryDatabase(), config=config)
        return

    try:
        ctx.obj = AppContext(db=get_database(config), config=config)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _fail(message: str) -> None:
    console.print(f"[red]✗[/red] {message}")
    raise typer.Exit(1)


def _parse_weekdays(value: Optional[str]) -> List[int]:
    if not value:
        return []
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise typer.BadParameter("Weekdays must be comma-separated numbers (0=Sun..6=Sat)")


def _parse_skill_option(option: str) -> tuple:
    """Parse SKILL_ID:CONFIDENCE[:TARGET_RESULT]."""
    parts = option.split(":")
    if len(parts) not in (2, 3):
        raise typer.BadParameter(f"Expected SKILL_ID:CONFIDENCE[:RESULT], got '{option}'")
    try:
        confidence = int(parts[1])
    except ValueError:
        raise typer.BadParameter(f"Confidence must be a whole number in '{option}'")
    target = parts[2] if len(parts) == 3 else ""
    return parts[0], SkillLogDraft(selected=True, confidence=confidence, target_result=target)


@app.command()
def init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Recreate tables even if the file exists"),
):
    """Create the SQLite database at the configured path"""
    db_path = ctx.obj.config.get_database_path()
    if db_path.exists() and not force:
        console.print(f"[yellow]Database already exists at {db_path}[/yellow]")
        return

    init_database(db_path)
    console.print(f"[green]✓[/green] Database ready at {db_path}")


@app.command()
def today(
    ctx: typer.Context,
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Day to show (YYYY-MM-DD)"),
    verbose: bool = typer.Option(False, "--all", "-a", help="Show full skill queue and weekly summary"),
):
    """
    Show the daily dashboard

    Displays:
    - Outputs scheduled for the day with weekly progress
    - Skills to practice next
    - Completion stats
    """
    app_ctx: AppContext = ctx.obj
    try:
        data = DashboardAggregator(app_ctx.db, app_ctx.config).aggregate(date)
        DashboardFormatter(console).render_dashboard(data, verbose=verbose)
    except HANDLED_ERRORS as e:
        _fail(f"Error loading dashboard: {e}")


@app.command("log")
def log_action(
    ctx: typer.Context,
    output_id: str = typer.Argument(..., help="Output ID"),
    completed: float = typer.Option(1, "--completed", "-c", help="Units completed"),
    total: Optional[float] = typer.Option(None, "--total", "-t", help="Units planned (default from schedule)"),
    notes: str = typer.Option("", "--notes", "-n", help="Notes for the day"),
    date: Optional[str] = typer.Option(None, "--date", "-d", help="Action date (YYYY-MM-DD, default today)"),
    skill: Optional[List[str]] = typer.Option(None, "--skill", "-s", help="SKILL_ID:CONFIDENCE[:RESULT], repeatable"),
):
    """
    Record today's progress on an output, optionally with skill confidence

    Example:
      tracker log 3f2a --completed 1 --skill 9c1e:4 --skill 77ab:3:12
    """
    app_ctx: AppContext = ctx.obj
    action_date = date or format_local_date(datetime.now())
    drafts = dict(_parse_skill_option(option) for option in skill or [])
    entries, error = build_selected_skill_entries(drafts)
    if error:
        _fail(error)

    try:
        output = app_ctx.outcomes.get_output(output_id)
        if total is None:
            total = output.frequency_value if output.frequency_type == 'flexible_weekly' else 1

        result = app_ctx.action_logs.save_action_log(output_id, action_date, completed, total, notes)
        console.print(f"[green]✓[/green] Logged {result.completed:g}/{total:g} for {output.description}")

        if not entries:
            return
        if result.completed <= 0:
            console.print("[yellow]Skill logs need a completed action; skipped.[/yellow]")
            return

        skill_service = app_ctx.skills
        created = skill_service.replace_skill_logs_for_action(result.action_log_id, entries)
        console.print(f"[green]✓[/green] Saved {len(entries)} skill log(s)")

        if not app_ctx.config.get("graduation_prompts_enabled", "preferences", True):
            return

        skills, _ = skill_service.fetch_skills_for_outcome(output.outcome_id)
        moved = run_graduation_prompt_flow(
            created_skill_ids=created,
            skills=skills,
            is_skill_eligible=skill_service.check_graduation_eligibility,
            move_to_review=lambda skill_id: skill_service.set_skill_stage(skill_id, 'review'),
            suppress_graduation=skill_service.suppress_skill_graduation,
            confirm_move_to_review=lambda message: typer.confirm(message, default=True),
        )
        for skill_id in moved:
            console.print(f"[cyan]→[/cyan] Moved {skill_id} to review")

    except HANDLED_ERRORS as e:
        _fail(str(e))


@app.command()
def summary(
    ctx: typer.Context,
    week_of: Optional[str] = typer.Option(None, "--week-of", "-w", help="Any date in the week (YYYY-MM-DD)"),
):
    """Show weekly skill progress per outcome"""
    app_ctx: AppContext = ctx.obj
    anchor = week_of or format_local_date(datetime.now())
    week_start = week_start_for(anchor, app_ctx.config.get_start_of_week())
    week_end = add_local_days(week_start, 6)

    try:
        outcomes = app_ctx.outcomes.list_outcomes()
        result = app_ctx.skills.compute_weekly_skill_summary_by_outcome(
            [outcome.id for outcome in outcomes], week_start, week_end
        )
    except HANDLED_ERRORS as e:
        _fail(str(e))

    console.print(f"[dim]Week {week_start} → {week_end}[/dim]")
    console.print(DashboardFormatter(console).format_skill_summary(result, outcome_title_map(outcomes)))


# ============================================================================
# Outcomes and outputs
# ============================================================================

@outcome_app.command("add")
def outcome_add(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Outcome title"),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Category label"),
):
    """Create an outcome"""
    try:
        outcome = ctx.obj.outcomes.create_outcome(title, category)
    except HANDLED_ERRORS as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] Created outcome [dim]{outcome.id}[/dim] {outcome.title}")


@outcome_app.command("list")
def outcome_list(ctx: typer.Context):
    """List outcomes with their active outputs"""
    app_ctx: AppContext = ctx.obj
    outcomes = app_ctx.outcomes.list_outcomes()
    if not outcomes:
        console.print("[dim]No outcomes yet[/dim]")
        return

    outputs = app_ctx.outcomes.list_outputs([outcome.id for outcome in outcomes])
    table = Table(title="Outcomes")
    table.add_column("ID", style="dim")
    table.add_column("Outcome / Output")
    table.add_column("Schedule")

    for outcome in outcomes:
        label = outcome.title + (f" [dim]({outcome.category})[/dim]" if outcome.category else "")
        table.add_row(outcome.id, f"[bold]{label}[/bold]", "")
        for output in outputs:
            if output.outcome_id == outcome.id:
                table.add_row(output.id, f"  {output.description}", frequency_description(output))

    console.print(table)


@output_app.command("add")
def output_add(
    ctx: typer.Context,
    outcome_id: str = typer.Argument(..., help="Outcome ID"),
    description: str = typer.Argument(..., help="What to do"),
    frequency: str = typer.Option("daily", "--frequency", "-f",
                                  help=f"One of: {', '.join(FREQUENCY_TYPES)}"),
    times: int = typer.Option(1, "--times", help="Weekly target for flexible outputs"),
    days: Optional[str] = typer.Option(None, "--days", help="Weekdays for fixed outputs, e.g. 1,3,5 (0=Sun)"),
):
    """Create a recurring output under an outcome"""
    try:
        output = ctx.obj.outcomes.create_output(
            outcome_id, description, frequency, times, _parse_weekdays(days)
        )
    except HANDLED_ERRORS as e:
        _fail(str(e))
    console.print(
        f"[green]✓[/green] Created output [dim]{output.id}[/dim] "
        f"{output.description} ({frequency_description(output)})"
    )


# ============================================================================
# Skills
# ============================================================================

@skill_app.command("add")
def skill_add(
    ctx: typer.Context,
    outcome_id: str = typer.Argument(..., help="Outcome ID"),
    name: str = typer.Argument(..., help="Skill name"),
    confidence: int = typer.Option(1, "--confidence", "-c", help="Starting confidence (1-5)"),
    target_label: Optional[str] = typer.Option(None, "--target-label", help="What the target measures"),
    target_value: Optional[float] = typer.Option(None, "--target-value", help="Numeric target"),
):
    """Create a skill under an outcome"""
    try:
        skill = ctx.obj.skills.create_skill_item(outcome_id, name, confidence, target_label, target_value)
    except HANDLED_ERRORS as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] Created skill [dim]{skill.id}[/dim] {skill.name}")


@skill_app.command("list")
def skill_list(
    ctx: typer.Context,
    outcome_id: str = typer.Argument(..., help="Outcome ID"),
):
    """List an outcome's skills with their latest confidence"""
    skills, logs = ctx.obj.skills.fetch_skills_for_outcome(outcome_id)
    if not skills:
        console.print("[dim]No skills for this outcome[/dim]")
        return

    latest = {}
    for log in logs:
        latest.setdefault(log.skill_item_id, log)

    table = Table(title="Skills")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Stage")
    table.add_column("Confidence", justify="right")
    table.add_column("Target", justify="right")

    for skill in skills:
        log = latest.get(skill.id)
        target = ""
        if skill.target_value is not None:
            target = f"{skill.target_label or ''} {skill.target_value:g}".strip()
        table.add_row(
            skill.id,
            skill.name,
            skill.stage,
            str(log.confidence if log else skill.initial_confidence),
            target,
        )

    console.print(table)


@skill_app.command("stage")
def skill_stage(
    ctx: typer.Context,
    skill_id: str = typer.Argument(..., help="Skill ID"),
    stage: str = typer.Argument(..., help="active, review or archived"),
):
    """Move a skill to another stage"""
    try:
        skill = ctx.obj.skills.set_skill_stage(skill_id, stage)
    except HANDLED_ERRORS as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] {skill.name} is now {skill.stage}")


@skill_app.command("queue")
def skill_queue(
    ctx: typer.Context,
    limit: int = typer.Option(10, "--limit", "-l", help="How many skills to show"),
):
    """Show skills ranked by practice priority"""
    app_ctx: AppContext = ctx.obj
    outcomes = app_ctx.outcomes.list_outcomes()
    queue = app_ctx.skills.priority_queue_for_outcomes([outcome.id for outcome in outcomes])
    console.print(DashboardFormatter(console).format_priority_queue(
        queue[:limit], title="Priority Queue", outcome_titles=outcome_title_map(outcomes)
    ))


def run():
    app()


if __name__ == "__main__":
    run()
