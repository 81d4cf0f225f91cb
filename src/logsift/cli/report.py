"""CLI commands that inspect a target and print a report."""

import click

from logsift.chunk_index import IndexAlgorithm
from logsift.cli.common import (
    algorithm_option,
    handle_errors,
    output_report,
    progress_option,
    report_options,
    resolve,
    resolve_model_path,
)
from logsift.model import Model


@click.command('diff')
@click.argument('baselines', nargs=-1, required=True)
@click.argument('target')
@algorithm_option
@progress_option
@report_options
@handle_errors
def diff_command(
    baselines: tuple[str, ...],
    target: str,
    algorithm: str,
    progress: bool,
    json_output: bool,
    color: bool | None,
):
    """Compare TARGET with one or more BASELINES.

    Each argument is a local path or an http(s) url: a file, a directory or
    a Zuul build.

    \b
    Examples:
        logsift diff good.log bad.log
        logsift diff logs/build-41/ logs/build-42/
        logsift diff https://logs.example.com/41/ https://logs.example.com/42/
    """
    target_content = resolve(target)
    baseline_contents = [resolve(baseline) for baseline in baselines]
    model = Model.train(baseline_contents, IndexAlgorithm.from_string(algorithm), show_progress=progress)
    output_report(model.report(target_content, show_progress=progress), json_output, color)


@click.command('check')
@click.argument('target')
@algorithm_option
@progress_option
@report_options
@handle_errors
def check_command(target: str, algorithm: str, progress: bool, json_output: bool, color: bool | None):
    """Compare TARGET with automatically discovered baselines.

    For a local file the baselines are its rotated versions (app.log.1,
    app.log.2.gz, ...), for a Zuul build the latest successful builds of the
    same job.

    \b
    Examples:
        logsift check /var/log/app.log
        logsift check https://zuul.example.com/t/tenant/build/<uuid>
    """
    target_content = resolve(target)
    baselines = target_content.discover_baselines()
    model = Model.train(baselines, IndexAlgorithm.from_string(algorithm), show_progress=progress)
    output_report(model.report(target_content, show_progress=progress), json_output, color)


@click.command('run')
@click.argument('model_path', metavar='MODEL')
@click.argument('target')
@progress_option
@report_options
@handle_errors
def run_command(model_path: str, target: str, progress: bool, json_output: bool, color: bool | None):
    """Inspect TARGET with a model created by `logsift train`."""
    model = Model.load(resolve_model_path(model_path))
    output_report(model.report(resolve(target), show_progress=progress), json_output, color)
