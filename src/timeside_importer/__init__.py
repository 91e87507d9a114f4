"""
TimeSide Batch Importer - Bulk import of media items into a TimeSide server

Imports a batch of records (title, source URL or local file, origin name and
album title) into a TimeSide audio-analysis server: every item is added to a
shared selection and processed by a shared experience, then its task is polled
until done.

Key Features:
    - Idempotent get-or-create of the shared selection and experience
    - YouTube / Deezer provider detection, plain URLs and local file uploads
    - Concurrent item pipelines with per-item failure isolation
    - Progressive (Fibonacci-like) backoff while waiting for tasks
    - Text and JSON import summaries with player deep links

Package Structure:
    importing: Batch import operations (resources, submission, polling, orchestration)
    utils:     Shared utilities (client, configuration, import files)

Example Usage:

    Basic Workflow:
        import timeside_importer as tsi

        client = tsi.utils.clients.create_timeside_client()
        config = tsi.utils.config.load_config()
        records = tsi.utils.datasource.read_import_records('./samples/input.json')

        orchestrator = tsi.BatchOrchestrator.from_config(client, config, base_dir='./samples')
        summary = orchestrator.run(records)
        print(summary.succeeded, summary.timed_out, summary.failed)

    CLI Usage:
        $ timeside-import run ./samples/input.json --summary-path ./summary.txt
        $ timeside-import ensure-resources
        $ timeside-import check <task-uuid>

Environment Setup:
    Required environment variables:
    - TIMESIDE_API_USER
    - TIMESIDE_API_PASS
    Optional:
    - TIMESIDE_API_URL (defaults to the WASABI sandbox)

    These can be set via .env files in:
    - Current working directory (.env, .env.local)
    - Project root directory
"""

__version__ = "0.1.0"

# Load environment on package import
from .core.utils.environment import setup_environment
setup_environment()

# Export core API modules
from . import core
importing = core.importing
utils = core.utils
BatchOrchestrator = core.BatchOrchestrator

__all__ = [
    '__version__',
    'importing',          # tsi.importing.*
    'utils',              # tsi.utils.*
    'BatchOrchestrator',  # tsi.BatchOrchestrator()
]

# Clean up namespace
del setup_environment, core
