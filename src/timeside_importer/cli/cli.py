# -*- coding: utf-8 -*-

import logging
from pathlib import Path

import click
import yaml

from ..core.importing.errors import (EmptyBatchError, RemoteError,
                                     ResourceCreationError)
from ..core.importing.orchestrator import BatchOrchestrator
from ..core.importing.summary import save_batch_summary
from ..core.utils.config import load_config, save_config
from ..core.utils.datasource import read_import_records
from ..core.utils.environment import setup_environment
from ..core.utils.misc import ensure_output_path, mask_path
from .utils import (
    setup_logging,
    _validate_positive_integer_callback,
    _get_client
)


@click.group()
@click.option(
    '-v', '--verbose', is_flag=True,
    help='Enable verbose (DEBUG) logging'
)
@click.option(
    '-q', '--quiet', is_flag=True,
    help='Only show warnings and errors'
)
@click.option(
    '--env-file', type=click.Path(dir_okay=False), default=None,
    help='Specific .env file to load credentials from.'
)
@click.option(
    '-c', '--config', 'config_path', type=click.Path(dir_okay=False), default=None,
    help=('YAML configuration file overriding the built-in defaults '
          '(API URL, selection and experience titles, presets, backoff...). '
          'Defaults to importer.yaml in the user config directory when present.')
)
@click.pass_context
def cli(ctx, verbose, quiet, env_file, config_path):
    """
    TimeSide Batch Importer CLI - Import media items into a TimeSide server.

    Items are added to a shared selection and processed by a shared
    experience. Both are created, or updated, when needed.

    \b
    Ensure the API credentials are set in your environment variables:
    - TIMESIDE_API_USER, TIMESIDE_API_PASS
    - TIMESIDE_API_URL (optional)
    """
    setup_logging(verbose=verbose, quiet=quiet)

    if env_file:
        setup_environment(verbose=verbose, env_file=env_file)

    ctx.ensure_object(dict)
    ctx.obj.setdefault('client', None)

    try:
        ctx.obj['config'] = load_config(config_path)
    except (FileNotFoundError, ValueError, TypeError) as e:
        logging.error(f"Invalid configuration: {e}")
        raise SystemExit(1)


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--summary-path', type=click.Path(dir_okay=False), default=None,
    help='Where to save the import summary as text. Not saved if omitted.'
)
@click.option(
    '--save-summary-dict', is_flag=True, default=False,
    help=('Save the summary as JSON next to the text summary. '
          'Useful for further processing or analysis.')
)
@click.option(
    '--max-workers', type=int, default=None,
    callback=_validate_positive_integer_callback,
    help=('Maximum number of items imported concurrently. Defaults to one worker thread '
          'per item, which means thousands of threads for very large files: set a bound '
          'there, remaining items wait for a free worker.')
)
@click.option(
    '--stop-on-failed', is_flag=True, default=False,
    help=('Stop polling a task as soon as the server reports it failed. '
          'By default failed tasks keep being polled until the backoff schedule is exhausted.')
)
@click.option(
    '--progress/--no-progress', default=True,
    help='Show a progress bar while items are imported.'
)
@click.pass_context
def run(ctx, input_file, summary_path, save_summary_dict, max_workers, stop_on_failed, progress):
    """
    Import every record of INPUT_FILE.

    \b
    INPUT_FILE:
      JSON array, JSONL, CSV or PARQUET file whose records have the keys
      "title", "url", "name" and "albumTitle". "url" is a YouTube or Deezer
      link, any other http(s) URL, or a path to a local audio file relative
      to the directory of INPUT_FILE.
    """
    config = ctx.obj['config']

    try:
        records = read_import_records(input_file)
    except ValueError as e:
        logging.error(f"Cannot read import file {mask_path(input_file)}: {e}")
        raise SystemExit(1)

    if not records:
        logging.error(f"Unexpected empty record list ({mask_path(input_file)}). Leaving now")
        raise SystemExit(1)

    client = _get_client(ctx)

    overrides = {'show_progress': progress}
    if max_workers is not None:
        overrides['max_workers'] = max_workers
    if stop_on_failed:
        overrides['stop_on_failed'] = True

    orchestrator = BatchOrchestrator.from_config(
        client, config,
        base_dir=Path(input_file).resolve().parent,
        **overrides
    )

    try:
        summary = orchestrator.run(records)
    except (EmptyBatchError, ResourceCreationError, RemoteError) as e:
        logging.error(f"Import aborted: {e}")
        raise SystemExit(1)

    if summary_path:
        ensure_output_path(Path(summary_path).resolve().parent, description="Summary folder")
    save_batch_summary(
        summary,
        summary_path=summary_path,
        return_as='print',
        save_dict=save_summary_dict
    )


@cli.command(name='ensure-resources')
@click.pass_context
def ensure_resources(ctx):
    """
    Create or update the shared selection and experience without importing items.
    """
    client = _get_client(ctx)
    orchestrator = BatchOrchestrator.from_config(client, ctx.obj['config'])
    try:
        collection, pipeline = orchestrator.ensure_resources()
    except (ResourceCreationError, RemoteError) as e:
        logging.error(f"Cannot ensure shared resources: {e}")
        raise SystemExit(1)
    click.echo(f"selection: {collection.uuid}")
    click.echo(f"experience: {pipeline.uuid}")


@cli.command()
@click.argument('task_uuids', nargs=-1, required=True)
@click.pass_context
def check(ctx, task_uuids):
    """
    Check the status of TimeSide tasks.

    \b
    TASK_UUIDS:
      UUID(s) of the tasks to check separated by spaces, as printed
      by the 'run' command.
    """
    client = _get_client(ctx)
    failed_checks = []
    for task_uuid in task_uuids:
        try:
            job = client.retrieve_job(task_uuid)
        except RemoteError as e:
            failed_checks.append((task_uuid, str(e)))
            continue
        logging.info(f"Task {task_uuid}: {job.status.name}")
        click.echo(f"{task_uuid}\t{job.status.name}")

    if failed_checks:
        logging.warning("Failed status checks:")
        for task_uuid, error in failed_checks:
            logging.warning(f"  - {task_uuid}: {error}")
        raise SystemExit(1)


@cli.command(name='show-config')
@click.option(
    '--save', 'save_path', type=click.Path(dir_okay=False), default=None,
    help='Also write the effective configuration to this YAML file.'
)
@click.pass_context
def show_config(ctx, save_path):
    """Print the effective configuration as YAML."""
    config = ctx.obj['config']
    click.echo(yaml.safe_dump(config.to_dict(), sort_keys=False, allow_unicode=True))
    if save_path:
        save_config(config, save_path)
