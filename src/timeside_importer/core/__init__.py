"""
Core functionality for TimeSide Batch Importer.

Architecture:
    importing/  - Batch import operations
      ├── models/       - Records, item sources, remote resources
      ├── errors/       - Exception taxonomy
      ├── sources/      - Media source resolution
      ├── resources/    - Get-or-create of the shared selection and experience
      ├── submit/       - Item, selection membership and task creation
      ├── poll/         - Task polling with progressive backoff
      ├── orchestrator/ - Concurrent batch orchestration
      └── summary/      - Import summary

    utils/      - Shared utilities and infrastructure
      ├── clients/      - TimeSide API client
      ├── config/       - Importer configuration (YAML)
      ├── datasource/   - Import file reading
      ├── misc/         - General utilities (internal)
      └── environment/  - Environment setup (internal)
"""

# Core module exports
from . import utils
from . import importing

# High-level orchestration interface
from .importing.orchestrator import BatchOrchestrator

__all__ = [
    'importing',          # Batch import operations
    'utils',              # Essential utilities and infrastructure
    'BatchOrchestrator',  # High-level orchestration interface
]
