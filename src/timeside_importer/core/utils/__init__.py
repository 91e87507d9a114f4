"""
Shared utilities for TimeSide Batch Importer.

Submodules:
    clients:     TimeSide API client (RemoteClient protocol and implementation)
    config:      Importer configuration, YAML overrides
    datasource:  Import file reading (JSON, JSONL, CSV, PARQUET)
    misc:        Internal utilities (internal)
    environment: Environment configuration (internal)

Example Usage:
    import timeside_importer as tsi

    client = tsi.utils.clients.create_timeside_client()
    config = tsi.utils.config.load_config('./importer.yaml')
    records = tsi.utils.datasource.read_import_records('./input.json')
"""

# Import modules to export
from . import clients     # Client creation utilities
from . import config      # Importer configuration
from . import datasource  # Import file reading

__all__ = [
    'clients',      # tsi.utils.clients.*
    'config',       # tsi.utils.config.*
    'datasource',   # tsi.utils.datasource.*
]

# Internal modules not exported:
# - misc (internal utilities)
# - environment (internal environment setup)
