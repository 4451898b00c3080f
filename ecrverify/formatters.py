"""
Rich output formatting for scenario reports.
"""

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import CheckStatus, ScenarioResult
from .scenarios import Scenario


class ReportFormatter:
    """
    Renders ScenarioResult objects for the terminal.

    Every sub-check is listed with its own status; the scenario is never
    collapsed to a single line.
    """

    def __init__(self, console: Optional[Console] = None):
        """Initialize formatter with Rich console."""
        self.console = console or Console()

        self.colors = {
            CheckStatus.PASSED: "green",
            CheckStatus.FAILED: "red",
            CheckStatus.NOT_APPLICABLE: "yellow",
        }

        self.symbols = {
            CheckStatus.PASSED: "✓",
            CheckStatus.FAILED: "✗",
            CheckStatus.NOT_APPLICABLE: "-",
        }

    def build_table(self, result: ScenarioResult) -> Table:
        table = Table(title=f"Scenario: {result.scenario}", show_lines=False)
        table.add_column("", width=1)
        table.add_column("Sub-check", style="bright_white")
        table.add_column("Status")
        table.add_column("Detail", style="dim")

        for outcome in result.outcomes:
            color = self.colors[outcome.status]
            table.add_row(
                Text(self.symbols[outcome.status], style=color),
                outcome.name,
                Text(outcome.status.value, style=color),
                outcome.message,
            )
        return table

    def format_summary(self, result: ScenarioResult) -> Text:
        summary = result.summary()
        text = Text()
        if result.passed:
            text.append("✓ Scenario passed", style="bold green")
        else:
            text.append("✗ Scenario failed", style="bold red")
        text.append(
            f"  ({summary['passed']} passed, {summary['failed']} failed, "
            f"{summary['not_applicable']} not applicable, {summary['total']} total)",
            style="dim",
        )
        return text

    def print_result(self, result: ScenarioResult) -> None:
        self.console.print(self.build_table(result))
        self.console.print(self.format_summary(result))

    def print_scenarios(self, scenarios: list[Scenario]) -> None:
        table = Table(title="Scenarios")
        table.add_column("Name", style="bold")
        table.add_column("Repositories from")
        table.add_column("Checks")
        table.add_column("Description", style="dim")

        for scenario in scenarios:
            table.add_row(
                scenario.name,
                scenario.identifiers_from,
                ", ".join(check.kind for check in scenario.checks),
                scenario.description,
            )
        self.console.print(table)
