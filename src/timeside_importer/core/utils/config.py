# -*- coding: utf-8 -*-

"""
Importer configuration.

Built-in defaults target the WASABI collection on the TimeSide sandbox. Any
field can be overridden from a YAML file, either given explicitly or found
in the platform user config directory.

Example importer.yaml:

    api_url: https://timeside.ircam.fr
    collection_title: WASABI
    pipeline_title: WASABI_experience
    presets:
      - /timeside/api/presets/842d911f-7dc2-4922-b861-fa8a3e076f72/
    backoff_schedule: [1, 2, 4, 8]
    max_workers: 16
"""

import os
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Optional

import platformdirs

from .clients import DEFAULT_API_URL, DEFAULT_TIMEOUT
from .misc import mask_path, read_yaml, write_yaml
from ..importing.models import DEFAULT_API_PREFIX, DEFAULT_PLAYER_URL
from ..importing.poll import DEFAULT_BACKOFF_SCHEDULE

CONFIG_FILENAME = "importer.yaml"


# Hardcoded uuid / hyperlinks of the sandbox server
DEFAULT_PRESETS = [
    '/timeside/api/presets/842d911f-7dc2-4922-b861-fa8a3e076f72/',  # aubio pitch
    '/timeside/api/presets/fe7a0c2c-57a8-4bf2-884c-b7a30f22a8dc/',  # mean DC shift
    '/timeside/api/presets/d7df195a-f15e-4e1b-9678-8f64d379ac42/',  # flac aubio
]

DEFAULT_PROVIDERS = {
    'youtube.com': '/timeside/api/providers/4f239dd8-c6fe-4888-b131-445b712f2b15/',
    'deezer.com': '/timeside/api/providers/32dd516a-5759-43fd-bc95-3d08eebee196/',
}


@dataclass
class ImporterConfig:
    """Settings of a batch import run."""
    api_url: str = DEFAULT_API_URL
    api_prefix: str = DEFAULT_API_PREFIX
    player_url: str = DEFAULT_PLAYER_URL
    collection_title: str = 'WASABI'
    pipeline_title: str = 'WASABI_experience'
    presets: List[str] = field(default_factory=lambda: list(DEFAULT_PRESETS))
    providers: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PROVIDERS))
    backoff_schedule: List[float] = field(default_factory=lambda: list(DEFAULT_BACKOFF_SCHEDULE))
    max_workers: Optional[int] = None
    stop_on_failed: bool = False
    request_timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        if not self.collection_title:
            raise ValueError("collection_title must not be empty.")
        if not self.pipeline_title:
            raise ValueError("pipeline_title must not be empty.")
        if not self.backoff_schedule:
            raise ValueError("backoff_schedule must contain at least one delay.")
        if self.max_workers is not None and self.max_workers <= 0:
            raise ValueError("max_workers must be a positive integer.")

    @classmethod
    def from_dict(cls, data: dict) -> 'ImporterConfig':
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**data)

    def to_dict(self) -> dict:
        return asdict(self)


def get_default_config_path() -> Path:
    """Get the platform-specific configuration file path."""
    config_dir = platformdirs.user_config_dir("timeside-importer", "wasabi")
    return Path(config_dir) / CONFIG_FILENAME


def load_config(config_path=None, **overrides) -> ImporterConfig:
    """
    Load the importer configuration.

    Args:
        config_path (str | Path): YAML file with overrides. If None, uses the
            user config file when it exists, else the built-in defaults.
        **overrides: Values taking precedence over the file (None values are ignored).

    Returns:
        ImporterConfig: The effective configuration.

    Raises:
        FileNotFoundError: If an explicit `config_path` does not exist.
        ValueError: If the file holds unknown keys or invalid values.
    """
    data = {}
    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
    else:
        default_path = get_default_config_path()
        if default_path.exists():
            config_path = default_path

    if config_path is not None:
        data = read_yaml(config_path) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")
        logging.debug(f"Loaded configuration from {mask_path(config_path)}")

    if 'api_url' not in data and os.getenv('TIMESIDE_API_URL'):
        data['api_url'] = os.getenv('TIMESIDE_API_URL')

    data.update({k: v for k, v in overrides.items() if v is not None})
    return ImporterConfig.from_dict(data)


def save_config(config: ImporterConfig, config_path=None) -> Path:
    """Write `config` as YAML, to the user config file by default."""
    config_path = Path(config_path) if config_path else get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    write_yaml(config.to_dict(), config_path)
    logging.info(f"Configuration saved to {mask_path(config_path)}")
    return config_path
