import typer

from techprobe.cli.commands import analyze, setup, utils

app = typer.Typer(
    name="techprobe",
    help="Website technology fingerprinting",
    add_completion=False
)

app.command()(setup.setup)
app.command()(analyze.analyze)
app.command()(analyze.scan)
app.command()(utils.signatures)
app.command()(utils.doctor)

VERSION = "1.0.0"


@app.command()
def version():
    """Show the TechProbe version."""
    typer.echo(f"TechProbe {VERSION}")


def version_callback(value: bool):
    if value:
        typer.echo(f"TechProbe {VERSION}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", callback=version_callback, is_eager=True),
):
    """
    TechProbe CLI - identify the technologies behind a website.
    """
    pass


if __name__ == "__main__":
    app()
