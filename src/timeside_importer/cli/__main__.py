"""
Console entry point of the TimeSide batch importer (`timeside-import`).

Every option can also come from the environment, or from a .env file, with
the TIMESIDE_IMPORT_ prefix:

    TIMESIDE_IMPORT_CONFIG_PATH=./importer.yaml   # timeside-import --config
    TIMESIDE_IMPORT_RUN_MAX_WORKERS=32            # timeside-import run --max-workers
"""

from .cli import cli

ENVVAR_PREFIX = 'TIMESIDE_IMPORT'


def main(argv=None):
    """Run the CLI. Exits with the status of the invoked command."""
    cli.main(args=argv, prog_name='timeside-import', auto_envvar_prefix=ENVVAR_PREFIX)


if __name__ == '__main__':
    main()
