"""CLI entry point: diffs against a branch, filters the profile, reports to stdout."""

import sys
from typing import NoReturn, Optional

import click
import structlog

from .config import load_config
from .engine import resolve_module_root, run_engine
from .errors import InccovError
from .git_diff import read_diff_file
from .log import configure_logging
from .stats import RunStats


def _fail(exc: InccovError) -> NoReturn:
    structlog.get_logger().error("inccov.failed", error=str(exc))
    click.echo(f"inccov: {exc}", err=True)
    sys.exit(1)


@click.command()
@click.version_option(package_name="inccov", prog_name="inccov")
@click.option("--branch", default=None, help="The compared branch name")
@click.option("--file", "coverage_file", default=None, help="The coverage file")
@click.option("--output", "-o", default=None, help="Where to write the incremental profile")
@click.option(
    "--diff",
    "diff_file",
    default=None,
    help="Read the diff from this file ('-' for stdin) instead of running git",
)
@click.option("--manifest", default=None, help="Module manifest (default: go.mod)")
@click.option(
    "--overlap",
    type=click.Choice(["compat", "strict"]),
    default=None,
    help="Block selection rule (default: compat)",
)
@click.option(
    "--inherit-mode",
    is_flag=True,
    help="Copy the input profile's mode header instead of 'mode: count'",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("-q", "--quiet", is_flag=True, help="Do not print the run summary")
def main(
    branch: Optional[str],
    coverage_file: Optional[str],
    output: Optional[str],
    diff_file: Optional[str],
    manifest: Optional[str],
    overlap: Optional[str],
    inherit_mode: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    """Write the coverage blocks touched by `git diff BRANCH HEAD`."""
    configure_logging(level="DEBUG" if verbose else "INFO")

    try:
        config = load_config()
    except InccovError as exc:
        _fail(exc)
    if branch is not None:
        config.branch = branch
    if coverage_file is not None:
        config.coverage_file = coverage_file
    if output is not None:
        config.output = output
    if manifest is not None:
        config.manifest = manifest
    if overlap is not None:
        config.strict_overlap = overlap == "strict"
    if inherit_mode:
        config.inherit_mode = True

    if not config.branch and diff_file is None:
        raise click.UsageError("--branch is required unless --diff is given")

    run_stats = RunStats()
    try:
        config.module_root = resolve_module_root(config)
        diff_text = read_diff_file(diff_file) if diff_file is not None else None
        run_engine(config, diff_text=diff_text, stats=run_stats)
    except InccovError as exc:
        _fail(exc)
    if not quiet:
        for line in run_stats.format_summary():
            click.echo(line)


if __name__ == "__main__":
    main()
