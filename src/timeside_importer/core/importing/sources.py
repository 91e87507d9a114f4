# -*- coding: utf-8 -*-
"""
Resolution of the media source of an input record.

A record locator is either an http(s) URL, served by a known provider
integration (YouTube, Deezer) or fetched directly by the server, or a path to
a local file relative to the import file directory.

Example Usage:
    source = resolve_item_source('https://www.deezer.com/track/1', '.', providers)
    # ExternalProviderURI(uri='https://www.deezer.com/track/1', provider=providers['deezer.com'])
"""

import os
import stat
import logging
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import urlsplit

from ..utils.misc import mask_path
from .errors import SourceResolutionError
from .models import ExternalProviderURI, ExternalURL, LocalFile

HTTP_SCHEMES = ('http', 'https')


def parse_http_url(locator: str):
    """Return the split URL if `locator` is an http(s) URL with a host, else None."""
    try:
        parsed = urlsplit(locator)
    except ValueError:
        return None
    if parsed.scheme.lower() not in HTTP_SCHEMES or not parsed.hostname:
        return None
    return parsed


def normalize_youtube_url(url: str) -> str:
    """
    Rewrite youtu.be short links to the canonical watch URL.

    Other URLs are returned unchanged.

    Example:
        >>> normalize_youtube_url('https://youtu.be/UBPI95GIbGg')
        'https://www.youtube.com/watch?v=UBPI95GIbGg'
    """
    parsed = parse_http_url(url)
    if parsed is None or parsed.hostname != 'youtu.be':
        return url
    video_id = parsed.path.strip('/')
    if not video_id:
        return url
    return f"https://www.youtube.com/watch?v={video_id}"


def get_provider(url: str, providers: Mapping[str, str]) -> Optional[str]:
    """
    Get the provider reference for a URL.

    Args:
        url (str): Source URL.
        providers (Mapping[str, str]): Domain -> provider reference. A domain
            matches itself and any of its subdomains (www., m., music. ...).

    Returns:
        str | None: The provider reference or None when the host is unknown
            or the URL cannot be parsed.
    """
    parsed = parse_http_url(url)
    if parsed is None:
        return None
    hostname = parsed.hostname.lower()
    for domain, provider in providers.items():
        domain = domain.lower()
        if hostname == domain or hostname.endswith('.' + domain):
            return provider
    return None


def resolve_local_file(locator: str, base_dir) -> LocalFile:
    """
    Resolve a local media path relative to `base_dir`.

    Raises:
        SourceResolutionError: If the path does not exist, is not a regular
            file, or cannot be read.
    """
    path = Path(locator).expanduser()
    if not path.is_absolute():
        path = Path(base_dir) / path

    try:
        file_stat = path.stat()
    except OSError as e:
        raise SourceResolutionError(f"Cannot access source file {path}: {e.strerror or e}") from e

    if not stat.S_ISREG(file_stat.st_mode):
        raise SourceResolutionError(f"{path} is not a file")
    if not os.access(path, os.R_OK):
        raise SourceResolutionError(f"{path} is not readable")

    logging.debug(f"Resolved local source file {mask_path(path)}")
    return LocalFile(path=path)


def resolve_item_source(locator: str, base_dir, providers: Mapping[str, str]):
    """
    Select the item source variant for a record locator.

    Args:
        locator (str): The record `url` field.
        base_dir (str | Path): Directory local paths are relative to,
            usually the directory of the import file.
        providers (Mapping[str, str]): Domain -> provider reference.

    Returns:
        ExternalProviderURI | ExternalURL | LocalFile

    Raises:
        SourceResolutionError: If the locator is empty or a local path that
            cannot be used.
    """
    if not locator:
        raise SourceResolutionError("Empty source locator")

    if parse_http_url(locator) is not None:
        url = normalize_youtube_url(locator)
        provider = get_provider(url, providers)
        if provider:
            return ExternalProviderURI(uri=url, provider=provider)
        return ExternalURL(uri=url)

    return resolve_local_file(locator, base_dir)
