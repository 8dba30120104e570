"""CLI entry point for swiprep.

Prepares the source checkout in the current directory for building:

    swiprep                  # core submodules, docs per stored policy, configure
    swiprep --all            # every known submodule
    swiprep --yes            # answer yes to all questions (bounded)
    swiprep --man            # download the documentation regardless of policy
    swiprep --server=URL     # use URL as the only documentation mirror
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console

from swiprep import __version__
from swiprep.click_command import PrepareCommand
from swiprep.config_manager import ConfigManager
from swiprep.errors import PrepareError
from swiprep.orchestrator import Phases, PrepareOrchestrator, PrepareReport

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s" if verbose else "%(message)s",
    )


def print_report(report: PrepareReport, console: Console) -> None:
    """Summarize what happened and show deferred warnings."""
    console.print()
    console.print(f"[bold]Source version {report.version}[/bold]")

    if report.submodules is not None:
        sub = report.submodules
        if sub.mutated:
            console.print(
                f"  submodules: [cyan]{len(sub.initialized)}[/cyan] initialized, "
                f"[cyan]{len(sub.updated)}[/cyan] updated"
                + (", URLs synced" if sub.synced else "")
            )
        else:
            console.print("  submodules: unchanged")
        skipped = sub.declined_init + sub.declined_update
        if skipped:
            console.print(f"  [yellow]skipped on request:[/yellow] {', '.join(skipped)}")

    if report.docs is not None:
        console.print(f"  documentation: {report.docs.state.value}")

    if report.configure is not None:
        console.print(
            f"  configure: [cyan]{len(report.configure.regenerated)}[/cyan] regenerated, "
            f"{len(report.configure.current)} up to date"
        )

    for warning in report.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")


@click.command(cls=PrepareCommand, context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--yes", "-y", "auto_confirm", is_flag=True, help="Answer yes to all questions")
@click.option("--all", "include_all", is_flag=True, help="Prepare all submodules, not only the core")
@click.option("--man", "force_docs", is_flag=True, help="Download the documentation bundle")
@click.option("--server", metavar="URL", help="Use URL as the only documentation mirror")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Top directory of the source checkout",
)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Config file path")
@click.option("--skip-submodules", is_flag=True, help="Do not touch git submodules")
@click.option("--skip-docs", is_flag=True, help="Do not check the documentation bundle")
@click.option("--skip-configure", is_flag=True, help="Do not regenerate configure scripts")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.version_option(version=__version__)
def main(
    auto_confirm: bool,
    include_all: bool,
    force_docs: bool,
    server: str | None,
    root: Path,
    config_path: str | None,
    skip_submodules: bool,
    skip_docs: bool,
    skip_configure: bool,
    verbose: bool,
) -> None:
    """Prepare a source checkout for building.

    Brings the git submodules up to date, fetches the HTML documentation
    matching the VERSION file and regenerates outdated configure scripts.
    """
    _setup_logging(verbose)
    console = Console(stderr=False)
    root = root.resolve()

    try:
        config = ConfigManager.load_config(root, config_path).with_overrides(
            auto_confirm=auto_confirm,
            include_all=include_all,
            force_docs=force_docs,
            server=server,
        )
        orchestrator = PrepareOrchestrator(root, config)
        report = orchestrator.run(
            Phases(
                submodules=not skip_submodules,
                docs=not skip_docs,
                configure=not skip_configure,
            )
        )
    except PrepareError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    print_report(report, console)


if __name__ == "__main__":
    main()
