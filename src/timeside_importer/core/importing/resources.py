# -*- coding: utf-8 -*-
"""
Get-or-create of the resources shared by every item of a batch: the
collection (TimeSide selection) and the pipeline (TimeSide experience).

Both operations are meant to run once per batch, before any item is
submitted. They are not safe against concurrent runs targeting the same title:
two runs may both create the resource, and concurrent pipeline updates are
last-writer-wins.
"""

import logging
from typing import Iterable, Sequence, Tuple
from urllib.parse import urlsplit

from .errors import RemoteError, ResourceCreationError
from .models import Collection, Pipeline


def strip_domain(url: str) -> str:
    """
    Keep only the path of a hyperlink.

    Example:
        >>> strip_domain('https://timeside.ircam.fr/timeside/api/presets/abc/')
        '/timeside/api/presets/abc/'
    """
    parsed = urlsplit(url)
    if parsed.scheme or parsed.netloc:
        return parsed.path
    return url


def same_presets(current: Iterable[str], desired: Iterable[str]) -> bool:
    """Order-sensitive comparison of two preset lists, ignoring scheme and host."""
    return [strip_domain(p) for p in current] == [strip_domain(p) for p in desired]


class ResourceReconciler:
    """Ensure the shared collection and pipeline exist with the desired configuration."""

    def __init__(self, client):
        self.client = client

    def ensure_collection(self, title: str) -> Collection:
        """
        Get the first collection titled `title`, creating it when absent.

        An existing collection is returned as-is.

        Raises:
            ResourceCreationError: If the server rejects the creation.
        """
        collections = self.client.list_collections()
        existing = next((c for c in collections if c.title == title), None)
        if existing is not None:
            logging.debug(f"Found collection '{title}': {existing.uuid}")
            return existing

        logging.info(f"Creating collection '{title}'...")
        try:
            collection = self.client.create_collection(title)
        except RemoteError as e:
            logging.error(f"Unable to create collection '{title}': {e.body}")
            raise ResourceCreationError(f"Unable to create collection '{title}': {e}", body=e.body) from e
        logging.info(f"Collection '{title}' created: {collection.uuid}")
        return collection

    def ensure_pipeline(self, title: str, desired_presets: Sequence[str]) -> Pipeline:
        """
        Get the first pipeline titled `title` with exactly `desired_presets`.

        A pipeline whose presets differ, in value or order, is updated in place.
        An absent pipeline is created.

        Args:
            title (str): Pipeline title.
            desired_presets (Sequence[str]): Ordered preset references.

        Returns:
            Pipeline: The existing, updated or created pipeline.

        Raises:
            ResourceCreationError: If the server rejects the creation or the update.
        """
        desired: Tuple[str, ...] = tuple(desired_presets)
        pipelines = self.client.list_pipelines()
        existing = next((p for p in pipelines if p.title == title), None)

        if existing is not None:
            if same_presets(existing.presets, desired):
                logging.debug(f"Found pipeline '{title}' up to date: {existing.uuid}")
                return existing

            logging.info(f"Pipeline '{title}' presets changed, updating {existing.uuid}...")
            try:
                return self.client.update_pipeline(existing.uuid, title, desired)
            except RemoteError as e:
                logging.error(f"Unable to update pipeline '{title}': {e.body}")
                raise ResourceCreationError(f"Unable to update pipeline '{title}': {e}", body=e.body) from e

        logging.info(f"Creating pipeline '{title}' with {len(desired)} presets...")
        try:
            pipeline = self.client.create_pipeline(title, desired)
        except RemoteError as e:
            logging.error(f"Unable to create pipeline '{title}': {e.body}")
            raise ResourceCreationError(f"Unable to create pipeline '{title}': {e}", body=e.body) from e
        logging.info(f"Pipeline '{title}' created: {pipeline.uuid}")
        return pipeline
