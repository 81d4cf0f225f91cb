"""CLI commands to create and describe saved models."""

import json

import click

from logsift.chunk_index import IndexAlgorithm
from logsift.cli.common import algorithm_option, handle_errors, progress_option, resolve, resolve_model_path
from logsift.model import Model


@click.command('train')
@click.argument('model_path', metavar='MODEL')
@click.argument('baselines', nargs=-1, required=True)
@algorithm_option
@progress_option
@handle_errors
def train_command(model_path: str, baselines: tuple[str, ...], algorithm: str, progress: bool):
    """Train a model from BASELINES and save it to MODEL.

    A MODEL name without directory is kept in the models cache directory
    (LOGSIFT_CACHE_DIR, default ~/.cache/logsift/models).

    \b
    Examples:
        logsift train app.model /var/log/app/good-run-1/ /var/log/app/good-run-2/
        logsift run app.model /var/log/app/latest/
    """
    model = Model.train([resolve(baseline) for baseline in baselines], IndexAlgorithm.from_string(algorithm), progress)
    path = resolve_model_path(model_path)
    model.save(path)
    click.echo(f'Saved {len(model.indexes)} indexes to {path}')


@click.command('info')
@click.argument('model_path', metavar='MODEL')
@click.option('--json', 'json_output', is_flag=True, help='Output in JSON format')
@handle_errors
def info_command(model_path: str, json_output: bool):
    """Show the baselines and indexes of a saved model."""
    model = Model.load(resolve_model_path(model_path))

    if json_output:
        output = {
            'created_at': model.created_at.isoformat(),
            'baselines': [str(baseline) for baseline in model.baselines],
            'indexes': [
                {
                    'name': str(name),
                    'algorithm': index.index.algorithm.value,
                    'sources': index.sources,
                    'train_time': index.train_time,
                }
                for name, index in model.indexes.items()
            ],
        }
        click.echo(json.dumps(output, indent=2))
        return

    click.echo(f'Created: {model.created_at.isoformat(timespec="seconds")}')
    click.echo(f'Baselines: {len(model.baselines)}')
    for baseline in model.baselines:
        click.echo(f'  {baseline}')
    click.echo(f'Indexes: {len(model.indexes)}')
    for name, index in model.indexes.items():
        click.echo(f'  {name or "<root>"}: {index.index.describe()}, {index.sources} sources, {index.train_time:.2f}s')
