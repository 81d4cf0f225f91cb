"""Options and helpers shared by the CLI commands."""

import functools
import os
import sys
from pathlib import Path

import click

from logsift.chunk_index import IndexAlgorithm
from logsift.errors import LogsiftError
from logsift.models import Report
from logsift.sources import Content, Input
from logsift.utils import get_logsift_cache_dir


def resolve(value: str) -> Content:
    """Convert a command line argument to Content."""
    return Content.from_input(Input.from_string(value))


algorithm_option = click.option(
    '--algorithm',
    type=click.Choice([algorithm.value for algorithm in IndexAlgorithm]),
    default=IndexAlgorithm.HASHING_TRICK.value,
    show_default=True,
    help='Search algorithm used to build the indexes',
)
progress_option = click.option(
    '--progress/--no-progress', default=False, help='Show progress messages on stderr'
)


def report_options(func):
    """Add the output options of the report commands."""
    func = click.option('--json', 'json_output', is_flag=True, help='Output in JSON format')(func)
    func = click.option(
        '--color/--no-color', default=None, help='Colorize output (default: when stdout is a terminal)'
    )(func)
    return func


def output_report(report: Report, json_output: bool, color: bool | None) -> None:
    if json_output:
        click.echo(report.model_dump_json(indent=2))
        return
    colorize = sys.stdout.isatty() if color is None else color
    click.echo(report.to_cli(colorize=colorize), color=colorize)


def handle_errors(func):
    """Report logsift errors as a one line message with exit code 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except LogsiftError as e:
            click.echo(click.style('Error: ', fg='red', bold=True) + str(e), err=True)
            sys.exit(1)

    return wrapper


def resolve_model_path(value: str) -> Path:
    """Resolve a MODEL argument.

    A bare name (no directory part) that is not an existing local file
    refers to the models cache directory.
    """
    path = Path(value)
    if os.path.dirname(value) or path.exists():
        return path
    return get_logsift_cache_dir('models') / value
