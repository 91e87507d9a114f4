"""
Command-line interface for TimeSide Batch Importer.

Commands:
    - run: Import every record of an import file
    - ensure-resources: Create or update the shared selection and experience
    - check: Check the status of tasks
    - show-config: Print the effective configuration

Environment Requirements:
    - TIMESIDE_API_USER, TIMESIDE_API_PASS
    - TIMESIDE_API_URL (optional)

Example Workflow:
    # 1. Import a batch and save the summary
    $ timeside-import run ./samples/input.json --summary-path ./runs/summary.txt

    # 2. Check tasks that timed out later on
    $ timeside-import check 5b0a... 77c1...

The CLI provides extensive help for each command:
    $ timeside-import --help
    $ timeside-import run --help
"""

from .cli import cli

__all__ = [
    'cli',  # Main CLI interface (Click command group)
]
