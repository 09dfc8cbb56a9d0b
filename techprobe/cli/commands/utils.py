import platform
import shutil
import sys

import typer
from rich import print as rprint
from rich.table import Table

from techprobe.core.config import ConfigManager
from techprobe.core.errors import RegistryError
from techprobe.engine.behavior import behavior_registry
from techprobe.engine.signatures import default_registry
from techprobe.utils.ux import console


def signatures(
    behavioral: bool = typer.Option(False, "--behavioral", help="List behavioral patterns instead"),
):
    """List the built-in technology signatures."""
    registry = behavior_registry() if behavioral else default_registry()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name")
    table.add_column("Category", style="dim")
    table.add_column("Signals")
    table.add_column("Rules", justify="right")

    for sig in registry:
        signal_types = sorted({rule.signal_type.value for rule in sig.rules})
        table.add_row(sig.name, sig.category, ", ".join(signal_types), str(len(sig.rules)))

    console.print(table)
    rprint(f"[bold cyan]{len(registry)} signatures[/bold cyan]")


def doctor():
    """Check environment health."""
    rprint("[bold cyan]Checking TechProbe environment...[/bold cyan]")
    rprint(f"• OS: {platform.system()} {platform.release()}")
    rprint(f"• Python: {sys.version.split()[0]}")

    try:
        rprint(f"• Signature registry: [green]{len(default_registry())} signatures[/green]")
    except RegistryError as e:
        rprint(f"• Signature registry: [red]CORRUPT ({e})[/red]")
        raise typer.Exit(code=1)

    ai_ok = ConfigManager.check_ai_setup()
    rprint(f"• AI suggester: {'[green]Configured[/green]' if ai_ok else '[yellow]Not configured (optional)[/yellow]'}")

    playwright = shutil.which("playwright")
    rprint(f"• Playwright CLI: {'[green]OK[/green]' if playwright else '[red]MISSING (needed for scan)[/red]'}")

    rprint("\n[bold green]System check complete.[/bold green]")
