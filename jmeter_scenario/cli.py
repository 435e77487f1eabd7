"""Command-line interface for JMeter Scenario.

This module provides a Click-based CLI that compiles scenario files
(YAML or JSON) into JMeter JMX test plans, reports what the compiler will
drop from a scenario, and checks generated plans.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from jmeter_scenario import __version__
from jmeter_scenario.core.jmx_generator import JMXGenerator
from jmeter_scenario.core.jmx_validator import JMXValidator
from jmeter_scenario.core.scenario_loader import ScenarioLoader
from jmeter_scenario.core.scenario_validator import ScenarioValidator
from jmeter_scenario.exceptions import JMeterScenarioException

console = Console()

LEVEL_STYLES = {"error": "red", "warning": "yellow", "info": "blue"}


def _configure_logging(verbose: bool) -> None:
    """Send library logs to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _default_output(scenario_file: str, test_name: Optional[str]) -> str:
    """Place "<test name>.jmx" next to the scenario file."""
    scenario_path = Path(scenario_file)
    stem = test_name or scenario_path.stem
    return str(scenario_path.parent / f"{stem}.jmx")


@click.group()
@click.version_option(version=__version__, prog_name="jmeter-scenario")
def cli():
    """JMeter Scenario - Compile API test scenarios into JMeter JMX test plans.

    A scenario file describes a test made of scenarios (thread groups) and
    requests (HTTP samplers) with headers, parameters, bodies and assertions.
    """
    pass


@cli.command()
@click.argument("scenario_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Output JMX file (default: <test name>.jmx next to the scenario file)",
)
@click.option("--threads", type=int, default=None, help="Threads per thread group")
@click.option("--rampup", type=int, default=None, help="Ramp-up period in seconds")
@click.option("--loops", type=int, default=None, help="Iterations per thread (-1 for infinite)")
@click.option("--listener-class", default=None, help="Backend listener client class name")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def generate(
    scenario_file: str,
    output: Optional[str],
    threads: Optional[int],
    rampup: Optional[int],
    loops: Optional[int],
    listener_class: Optional[str],
    verbose: bool,
):
    """Generate a JMX test plan from a scenario file.

    Settings from the file's "settings" section are overridden by the
    command-line options.

    Example:
        jmeter-scenario generate petstore.yaml
        jmeter-scenario generate petstore.yaml -o out/petstore.jmx --threads 10
    """
    _configure_logging(verbose)
    try:
        loaded = ScenarioLoader().load(scenario_file)
        settings = loaded.settings.override(
            threads=threads,
            ramp_time=rampup,
            loops=loops,
            listener_classname=listener_class,
        )
        output = output or _default_output(scenario_file, loaded.test.name)

        console.print(f"[bold]Generating JMX file:[/bold] {escape(output)}")
        console.print(f"[dim]  Threads: {settings.threads}[/dim]")
        console.print(f"[dim]  Ramp-up: {settings.ramp_time}s[/dim]")
        console.print(f"[dim]  Loops: {settings.loops}[/dim]\n")

        result = JMXGenerator(settings).generate(loaded.test, output)

        panel = Panel(
            f"[bold green]✓ JMX file generated successfully![/bold green]\n\n"
            f"[cyan]File:[/cyan] {escape(result['jmx_path'])}\n"
            f"[cyan]Thread groups:[/cyan] {result['thread_groups_created']}\n"
            f"[cyan]Samplers:[/cyan] {result['samplers_created']}\n"
            f"[cyan]Header managers:[/cyan] {result['header_managers_added']}\n"
            f"[cyan]Assertions:[/cyan] {result['assertions_added']}\n\n"
            f"[dim]Next step: Open in JMeter GUI or run headless[/dim]",
            title="Generation Complete",
            border_style="green",
        )
        console.print(panel)

    except FileNotFoundError as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except JMeterScenarioException as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


@cli.command()
@click.argument("scenario_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def validate(scenario_file: str, verbose: bool):
    """Report what the compiler will drop or degrade in a scenario file.

    Errors (the file cannot be loaded) exit with status 1; warnings and
    info entries do not.

    Example:
        jmeter-scenario validate petstore.yaml
    """
    _configure_logging(verbose)
    console.print(f"\n[bold]Validating scenario file:[/bold] {escape(scenario_file)}\n")

    result = ScenarioValidator().validate_file(scenario_file)

    if result.test_name:
        console.print(f"Test: {escape(result.test_name)}\n")

    if result.is_valid:
        console.print(
            Panel(
                f"[bold green]✓ Scenario is valid! ({result.warnings_count} warning(s))[/bold green]",
                border_style="green",
            )
        )
    else:
        console.print(
            Panel(
                f"[bold red]✗ Scenario has {result.errors_count} error(s), "
                f"{result.warnings_count} warning(s)[/bold red]",
                border_style="red",
            )
        )

    if result.issues:
        table = Table(title="Validation Issues", show_header=True)
        table.add_column("#", style="dim", width=3)
        table.add_column("Level", no_wrap=True)
        table.add_column("Category", style="cyan", no_wrap=True)
        table.add_column("Location", style="magenta")
        table.add_column("Message")
        for idx, issue in enumerate(result.issues, 1):
            style = LEVEL_STYLES.get(issue.level, "white")
            table.add_row(
                str(idx),
                f"[{style}]{issue.level.upper()}[/{style}]",
                issue.category,
                escape(issue.location or ""),
                escape(issue.message),
            )
        console.print(table)

    console.print()

    if not result.is_valid:
        sys.exit(1)


@cli.command()
@click.argument("jmx_file", type=click.Path(exists=True, dir_okay=False))
def check(jmx_file: str):
    """Check the structure of a generated JMX test plan.

    Example:
        jmeter-scenario check petstore.jmx
    """
    try:
        console.print(f"\n[bold]Checking JMX file:[/bold] {escape(jmx_file)}\n")

        result = JMXValidator().validate(jmx_file)

        if result["valid"]:
            console.print(
                Panel(
                    "[bold green]✓ JMX file is valid![/bold green]",
                    border_style="green",
                )
            )
        else:
            console.print(
                Panel(
                    f"[bold red]✗ JMX file has {len(result['issues'])} issue(s)[/bold red]",
                    border_style="red",
                )
            )
            console.print("\n[bold red]Issues Found:[/bold red]")
            for i, issue in enumerate(result["issues"], 1):
                console.print(f"  {i}. {escape(issue)}")

        if result["recommendations"]:
            console.print("\n[bold yellow]Recommendations:[/bold yellow]")
            for i, rec in enumerate(result["recommendations"], 1):
                console.print(f"  {i}. {escape(rec)}")

        console.print()

        if not result["valid"]:
            sys.exit(1)

    except FileNotFoundError:
        console.print(f"\n[bold red]Error:[/bold red] File not found: {escape(jmx_file)}")
        sys.exit(1)
    except JMeterScenarioException as e:
        console.print(f"\n[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)


def main():
    """Entry point for CLI application."""
    cli()


if __name__ == "__main__":
    main()
