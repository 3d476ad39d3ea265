"""
Rich formatter module for the Outcome Tracker Dashboard.

Handles all Rich-based CLI formatting for the daily dashboard, the skill
priority queue and the weekly skill summary.
"""

from typing import Dict, List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tracker.core.dates import parse_local_date
from tracker.dashboard.aggregator import DailyDashboard, DailyStats, DashboardOutput
from tracker.dashboard.workflows import frequency_description, score_label
from tracker.skills.priority import SkillPriority
from tracker.skills.weekly_summary import SkillSummary

STAGE_COLORS = {
    "active": "green",
    "review": "cyan",
    "archived": "dim",
}


def _truncate(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


class DashboardFormatter:
    """
    Rich-based formatter for the daily dashboard.

    Creates terminal output using Rich panels, tables, and styling.
    """

    def __init__(self, console: Optional[Console] = None):
        """
        Initialize formatter.

        Args:
            console: Rich Console instance (creates default if not provided)
        """
        self.console = console or Console()

    def _format_log_status(self, entry: DashboardOutput) -> str:
        log = entry.today_log
        if log is None:
            return "[dim]○[/dim]"
        if log.total > 0 and log.completed >= log.total:
            return "[green]✓[/green]"
        if log.completed > 0:
            return "[yellow]◐[/yellow]"
        return "[red]✗[/red]"

    def _format_progress(self, entry: DashboardOutput) -> str:
        progress = entry.weekly_progress
        color = "green" if progress.target_met else "white"
        return f"[{color}]{progress.completed:g}/{progress.target:g}[/{color}] [dim]({progress.rate}%)[/dim]"

    def format_header(self, data: DailyDashboard) -> Panel:
        """Header panel with the date and week range."""
        day = parse_local_date(data.date)
        content = Text()
        content.append(day.strftime("%A, %B %d, %Y") + "\n", style="bold")
        content.append(f"Week {data.week_start} → {data.week_end}", style="dim")

        return Panel(
            content,
            title="[bold]Today[/bold]",
            title_align="center",
            border_style="blue",
            padding=(0, 2),
        )

    def format_scheduled_outputs(self, data: DailyDashboard) -> Panel:
        """
        Panel listing outputs scheduled for the day, grouped by outcome.

        Args:
            data: Dashboard data

        Returns:
            Rich Panel with one row per scheduled output
        """
        table = Table(show_header=False, box=None, padding=(0, 1), expand=True)
        table.add_column("Status", width=2)
        table.add_column("Output", ratio=1)
        table.add_column("Schedule", width=26)
        table.add_column("Week", width=16, justify="right")

        rows = 0
        for outcome in data.outcomes:
            scheduled = [entry for entry in outcome.outputs if entry.scheduled_today]
            if not scheduled:
                continue

            table.add_row("", f"[bold]{outcome.outcome.title}[/bold]", "", "")
            for entry in scheduled:
                table.add_row(
                    self._format_log_status(entry),
                    _truncate(entry.output.description, 40),
                    f"[dim]{frequency_description(entry.output)}[/dim]",
                    self._format_progress(entry),
                )
                rows += 1

        if rows == 0:
            return Panel(
                Text("Nothing scheduled today", justify="center", style="dim"),
                title="[bold]Scheduled[/bold]",
                border_style="green",
                padding=(0, 1),
            )

        return Panel(table, title="[bold]Scheduled[/bold]", border_style="green", padding=(0, 1))

    def format_priority_queue(
        self,
        queue: Sequence[SkillPriority],
        title: str = "Practice Next",
        outcome_titles: Optional[Dict[str, str]] = None,
    ) -> Panel:
        """
        Panel with ranked skills and their score breakdown.

        Args:
            queue: Ranked skill priorities
            title: Panel title
            outcome_titles: Optional outcome id -> title for an extra column

        Returns:
            Rich Panel with the ranked skills
        """
        if not queue:
            return Panel(
                Text("No skills to practice", justify="center", style="dim"),
                title=f"[bold]{title}[/bold]",
                border_style="magenta",
                padding=(0, 1),
            )

        table = Table(box=None, padding=(0, 1), expand=True)
        table.add_column("#", width=3)
        table.add_column("Skill", ratio=1)
        if outcome_titles is not None:
            table.add_column("Outcome", width=18)
        table.add_column("Conf", width=4, justify="right")
        table.add_column("Days", width=4, justify="right")
        table.add_column("Score", width=5, justify="right")

        for index, entry in enumerate(queue, 1):
            stage_color = STAGE_COLORS.get(entry.skill.stage, "white")
            name = f"[{stage_color}]{_truncate(entry.skill.name, 32)}[/{stage_color}]"
            row = [f"[bold]{index}.[/bold]", name]
            if outcome_titles is not None:
                row.append(f"[dim]{_truncate(outcome_titles.get(entry.skill.outcome_id, ''), 16)}[/dim]")
            row.extend([
                str(entry.latest_confidence),
                str(entry.days_since_last),
                score_label(entry.final_score),
            ])
            table.add_row(*row)

        return Panel(table, title=f"[bold]{title}[/bold]", border_style="magenta", padding=(0, 1))

    def format_skill_summary(
        self,
        summary: Dict[str, SkillSummary],
        outcome_titles: Dict[str, str],
    ) -> Panel:
        """Panel with per-outcome weekly skill activity."""
        table = Table(box=None, padding=(0, 1), expand=True)
        table.add_column("Outcome", ratio=1)
        table.add_column("Skills worked", width=14, justify="right")
        table.add_column("Avg Δ confidence", width=18, justify="right")

        for outcome_id, item in summary.items():
            delta = item.average_confidence_delta
            if delta is None:
                delta_str = "[dim]---[/dim]"
            elif delta > 0:
                delta_str = f"[green]+{delta:.1f}[/green]"
            elif delta < 0:
                delta_str = f"[red]{delta:.1f}[/red]"
            else:
                delta_str = "0.0"

            table.add_row(
                outcome_titles.get(outcome_id, outcome_id),
                str(item.skills_worked_count),
                delta_str,
            )

        return Panel(table, title="[bold]This Week's Skills[/bold]", border_style="cyan", padding=(0, 1))

    def format_stats_bar(self, stats: DailyStats) -> str:
        parts = [
            f"[green]✓ {stats.completed_count}/{stats.scheduled_count} done[/green]",
            f"[dim]{stats.completion_rate}%[/dim]",
        ]
        if stats.missed_yesterday_count > 0:
            parts.append(f"[red]⚠ {stats.missed_yesterday_count} missed yesterday[/red]")
        return " │ ".join(parts)

    def render_dashboard(self, data: DailyDashboard, verbose: bool = False) -> None:
        """
        Render the complete dashboard to console.

        Args:
            data: Complete dashboard data
            verbose: Show the full priority queue and weekly summary
        """
        outcome_titles = {outcome.outcome.id: outcome.outcome.title for outcome in data.outcomes}

        self.console.print(self.format_header(data))
        self.console.print()

        self.console.print(self.format_scheduled_outputs(data))
        self.console.print()

        self.console.print(self.format_priority_queue(data.top_suggestions, outcome_titles=outcome_titles))
        self.console.print()

        if verbose:
            self.console.print(self.format_priority_queue(
                data.priority_queue, title="All Skills", outcome_titles=outcome_titles
            ))
            self.console.print()
            self.console.print(self.format_skill_summary(data.skill_summary, outcome_titles))
            self.console.print()

        self.console.print("─" * 60)
        self.console.print(self.format_stats_bar(data.stats), justify="center")
        self.console.print("─" * 60)


def outcome_title_map(outcomes: List) -> Dict[str, str]:
    """Map outcome id to title for formatter columns."""
    return {outcome.id: outcome.title for outcome in outcomes}
