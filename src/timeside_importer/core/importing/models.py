# -*- coding: utf-8 -*-
"""
Data model shared by the importer components.

Remote resources are decoded from the TimeSide REST payloads into frozen
dataclasses so that the shared collection and pipeline handles can be passed
to concurrent item pipelines without locking.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_API_PREFIX = '/timeside/api'
DEFAULT_PLAYER_URL = 'https://ircam-web.github.io/timeside-player'


class JobStatus(IntEnum):
    """Task status codes as returned by the TimeSide API."""
    FAILED = 0
    DRAFT = 1
    PENDING = 2
    RUNNING = 3
    DONE = 4


def api_reference(kind: str, uuid: str, api_prefix: str = DEFAULT_API_PREFIX) -> str:
    """
    Build the hyperlink used by the API to reference a resource.

    Example:
        >>> api_reference('items', 'abc')
        '/timeside/api/items/abc/'
    """
    return f"{api_prefix.rstrip('/')}/{kind}/{uuid}/"


#=============================================================================
# Input records
#=============================================================================

@dataclass(frozen=True)
class InputRecord:
    """One row of an import batch."""
    title: str
    url: str
    name: str
    album_title: str

    @classmethod
    def from_dict(cls, data: dict) -> 'InputRecord':
        """
        Build a record from an import file row.

        Accepts both the `albumTitle` key used by the import files and
        `album_title`. Missing values become empty strings so that validation
        can report them per item instead of failing the whole file.
        """
        album_title = data.get('albumTitle')
        if album_title is None:
            album_title = data.get('album_title')
        return cls(
            title=_as_text(data.get('title')),
            url=_as_text(data.get('url')),
            name=_as_text(data.get('name')),
            album_title=_as_text(album_title),
        )

    @property
    def description(self) -> str:
        return f"Music from {self.name} - {self.album_title}"


def _as_text(value) -> str:
    if value is None:
        return ''
    return str(value).strip()


#=============================================================================
# Item sources
#=============================================================================

@dataclass(frozen=True)
class ExternalProviderURI:
    """Media served by a provider integration known to the server (YouTube, Deezer)."""
    uri: str
    provider: str

    def payload(self) -> dict:
        return {'external_uri': self.uri, 'provider': self.provider}


@dataclass(frozen=True)
class ExternalURL:
    """Media downloadable from an arbitrary URL."""
    uri: str

    def payload(self) -> dict:
        return {'source_url': self.uri}


@dataclass(frozen=True)
class LocalFile:
    """Media file on the local disk, uploaded when the item is created."""
    path: Path

    def payload(self) -> dict:
        return {}

    def open(self):
        """Open the file lazily as a binary stream. Caller closes it."""
        return open(self.path, 'rb')


#=============================================================================
# Remote resources
#=============================================================================

@dataclass(frozen=True)
class Collection:
    """A TimeSide selection."""
    uuid: str
    title: str
    items: Tuple[str, ...] = ()

    @classmethod
    def from_api(cls, data: dict) -> 'Collection':
        return cls(
            uuid=data['uuid'],
            title=data.get('title', ''),
            items=tuple(data.get('items') or ()),
        )


@dataclass(frozen=True)
class Pipeline:
    """A TimeSide experience: an ordered list of preset references."""
    uuid: str
    title: str
    presets: Tuple[str, ...] = ()

    @classmethod
    def from_api(cls, data: dict) -> 'Pipeline':
        return cls(
            uuid=data['uuid'],
            title=data.get('title', ''),
            presets=tuple(data.get('presets') or ()),
        )


@dataclass(frozen=True)
class Item:
    uuid: str
    title: str
    description: str = ''

    @classmethod
    def from_api(cls, data: dict) -> 'Item':
        return cls(
            uuid=data['uuid'],
            title=data.get('title', ''),
            description=data.get('description') or '',
        )


@dataclass(frozen=True)
class Job:
    """A TimeSide task binding one item to one experience within one selection."""
    uuid: str
    status: JobStatus
    pipeline: Optional[str] = None
    collection: Optional[str] = None
    item: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> 'Job':
        return cls(
            uuid=data['uuid'],
            status=JobStatus(int(data.get('status', JobStatus.PENDING))),
            pipeline=data.get('experience'),
            collection=data.get('selection'),
            item=data.get('item'),
        )


@dataclass(frozen=True)
class Submission:
    """Remote resources created for one input record."""
    item: Item
    job: Job


@dataclass(frozen=True)
class PreparedItem:
    """A validated record together with its resolved media source."""
    record: InputRecord
    source: object = field(default=None)
