# -*- coding: utf-8 -*-

import logging

import click

from ..core.importing.errors import RemoteError
from ..core.utils.clients import create_timeside_client
from ..core.utils.environment import validate_required_env_vars


def setup_logging(verbose=False, quiet=False):
    """Configure logging for CLI execution."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    # Configure root logger
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True  # Override any existing configuration
    )

    # Reduce noise from external libraries in non-verbose mode
    if not verbose:
        logging.getLogger("urllib3").setLevel(logging.WARNING)
        logging.getLogger("requests").setLevel(logging.WARNING)

    if verbose:
        logger = logging.getLogger(__name__)
        logger.debug("CLI logging setup completed")


def _validate_positive_integer_callback(ctx, param, value):
    """Validate that the provided value is a positive integer."""
    if value is not None and value <= 0:
        raise click.BadParameter("Value must be a positive integer.")
    return value


def _get_client(ctx):
    """
    Create the TimeSide client once per CLI invocation.

    Exits if credentials are missing or rejected.
    """
    if ctx.obj.get('client') is not None:
        return ctx.obj['client']

    missing_vars = validate_required_env_vars()
    if missing_vars:
        logging.error(f"Missing required environment variables: {missing_vars}")
        logging.info("Please set these environment variables or create a "
                     ".env file at the repo root directory with:")
        for var in missing_vars:
            logging.info(f"  {var}=your_value_here")
        raise SystemExit(1)

    config = ctx.obj['config']
    try:
        client = create_timeside_client(
            api_url=config.api_url,
            api_prefix=config.api_prefix,
            timeout=config.request_timeout
        )
    except (ValueError, RemoteError) as e:
        logging.error(f"Error creating TimeSide client: {e}")
        raise SystemExit(1)

    ctx.obj['client'] = client
    return client
