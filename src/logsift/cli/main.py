"""Main CLI entry point with command groups"""

import click

from logsift.__version__ import __version__
from logsift.cli.model import info_command, train_command
from logsift.cli.report import check_command, diff_command, run_command
from logsift.utils import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name='logsift')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """
    logsift - Find the anomalous lines of a log by comparing it with nominal runs.

    \b
    Commands:
      logsift diff BASELINE... TARGET   Compare a target with baselines
      logsift check TARGET              Compare a target with discovered baselines
      logsift train MODEL BASELINE...   Save a model trained from baselines
      logsift run MODEL TARGET          Inspect a target with a saved model
      logsift info MODEL                Describe a saved model

    \b
    Environment:
      LOGSIFT_THRESHOLD       Minimum distance of an anomaly (default: 0.3)
      LOGSIFT_CONTEXT_LINES   Lines shown around anomalies (default: 3)
      LOGSIFT_CHUNK_SIZE      Lines searched at once (default: 512)
      LOGSIFT_HTTP_TIMEOUT    Timeout of remote requests in seconds (default: 30)
      LOGSIFT_BASELINE_LIMIT  Number of CI builds used as baselines (default: 1)
      LOGSIFT_LOG_LEVEL       Logging level (default: WARNING)
    """
    setup_logging(verbose)


cli.add_command(diff_command, name='diff')
cli.add_command(check_command, name='check')
cli.add_command(train_command, name='train')
cli.add_command(run_command, name='run')
cli.add_command(info_command, name='info')


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
