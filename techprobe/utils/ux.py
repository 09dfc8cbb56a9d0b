from typing import Iterable

from rich.console import Console
from rich.table import Table
from yaspin import yaspin

from techprobe.engine.models import DetectionFinding, SocialIntegrationFinding

console = Console(width=120)


class UX:
    """
    Centralized terminal output for the CLI.
    Wraps Yaspin for spinners and consolidates Rich output.
    """

    @staticmethod
    def spinner(text: str):
        return yaspin(text=text, color="cyan", spinner="dots")

    @staticmethod
    def print_success(message: str):
        console.print(f"[green]✓ {message}[/green]")

    @staticmethod
    def print_error(message: str):
        console.print(f"[red]✗ {message}[/red]")

    @staticmethod
    def print_warning(message: str):
        console.print(f"[yellow]⚠️  {message}[/yellow]")

    @staticmethod
    def technology_table(findings: Iterable[DetectionFinding], title: str = "Technologies") -> Table:
        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column("Technology")
        table.add_column("Category", style="dim")
        table.add_column("Version")
        table.add_column("Confidence", justify="right")
        table.add_column("Method")
        for f in findings:
            style = "green" if f.confidence > 0.7 else "yellow"
            table.add_row(
                f.name, f.category, f.version or "-",
                f"[{style}]{f.confidence:.0%}[/{style}]", f.detection_method,
            )
        return table

    @staticmethod
    def social_table(findings: Iterable[SocialIntegrationFinding]) -> Table:
        table = Table(title="Social integrations", show_header=True, header_style="bold magenta")
        table.add_column("Platform")
        table.add_column("Category")
        table.add_column("Method")
        table.add_column("Confidence", justify="right")
        table.add_column("Evidence", style="dim")
        for f in findings:
            table.add_row(
                f.platform, f.category, f.integration_method,
                f"{f.confidence:.0%}", ", ".join(f.evidence[:3]),
            )
        return table
