"""
ecrverify CLI - Post-deployment verification for ECR registry modules.
"""

import logging
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.panel import Panel

from .context import ProvisioningContext, StaticContext, TerraformContext
from .errors import ConfigurationError, EcrVerifyError
from .formatters import ReportFormatter
from .inspector import create_ecr_client
from .runner import ScenarioRunner
from .scenarios import get_scenario, list_scenarios
from .settings import get_settings

# Setup
app = typer.Typer(
    name="ecrverify",
    help="Verify a deployed container registry against its declared configuration",
    add_completion=False,
)
console = Console()


def configure_logging():
    """Configure logging based on settings."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Configure logging on module import
configure_logging()


def _parse_outputs(pairs: List[str]) -> Dict[str, str]:
    """Parse repeated ``--output key=value`` options.

    Raises:
        typer.BadParameter: If a pair has no '='
    """
    outputs = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got '{pair}'", param_hint="--output")
        outputs[key.strip()] = value
    return outputs


def _create_command_panel(title: str, color: str, context: ProvisioningContext) -> Panel:
    """Create a Rich Panel describing the scenario being verified."""
    return Panel.fit(
        f"[bold {color}]{title}[/bold {color}]\n"
        f"Variables: {context.config_folder / context.scenario_name / context.config_file_name}",
        border_style=color,
    )


def _handle_command_error(e: Exception, command_type: str) -> None:
    """Print a command error and exit with code 1.

    Raises:
        SystemExit: Always exits with code 1
    """
    if isinstance(e, ConfigurationError):
        console.print("\n[bold red]✗ Declared configuration error[/bold red]")
        console.print(f"[dim]{e}[/dim]")
    else:
        console.print(
            f"\n[bold red]✗ {command_type.capitalize()} failed:[/bold red] {e}"
        )

    raise typer.Exit(code=1)


@app.command()
def run(
    scenario: str = typer.Argument(..., help="Scenario name (see 'ecrverify list')"),
    folder: Optional[str] = typer.Option(
        None, "--folder", help="Example folder name (defaults to the scenario name)"
    ),
    config_folder: Optional[str] = typer.Option(
        None, "--config-folder", help="Folder containing example folders (overrides .env)"
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config-file", help="Variables file name (overrides .env)"
    ),
    outputs: List[str] = typer.Option(
        [], "--output", "-o", help="Provisioning output KEY=VALUE; skips terraform output"
    ),
    region: Optional[str] = typer.Option(None, "--region", help="AWS region (overrides .env)"),
    profile: Optional[str] = typer.Option(None, "--profile", help="AWS profile (overrides .env)"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
):
    """Verify one scenario against live ECR state."""
    settings = get_settings()

    try:
        definition = get_scenario(scenario)
    except KeyError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {e.args[0]}")
        raise typer.Exit(code=1)

    folder_name = folder or definition.name
    config_folder = config_folder or settings.config_folder
    config_file = config_file or settings.config_file_name

    if outputs:
        context: ProvisioningContext = StaticContext(
            config_folder, folder_name, config_file, outputs=_parse_outputs(outputs)
        )
    else:
        context = TerraformContext(
            config_folder,
            folder_name,
            config_file,
            terraform_binary=settings.terraform_binary,
        )

    if not as_json:
        console.print(_create_command_panel(f"ecrverify: {definition.name}", "blue", context))

    try:
        client = create_ecr_client(
            region=region or settings.aws_region,
            profile=profile or settings.aws_profile,
        )
        result = ScenarioRunner(client).run(definition, context)
    except EcrVerifyError as e:
        _handle_command_error(e, "verification")
        return

    if as_json:
        typer.echo(result.to_json())
    else:
        ReportFormatter(console).print_result(result)

    if not result.passed:
        raise typer.Exit(code=1)


@app.command(name="list")
def list_cmd():
    """List built-in scenarios."""
    ReportFormatter(console).print_scenarios(list_scenarios())


@app.command()
def version():
    """Show ecrverify version."""
    from . import __version__

    console.print(f"ecrverify version: [bold]{__version__}[/bold]")


if __name__ == "__main__":
    app()
