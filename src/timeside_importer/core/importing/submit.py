# -*- coding: utf-8 -*-
"""
Submission of one input record: remote item, collection membership and job.
"""

import logging
from pathlib import Path
from typing import Mapping, Optional

from .errors import ValidationError
from .models import (DEFAULT_API_PREFIX, Collection, InputRecord, JobStatus,
                     Pipeline, PreparedItem, Submission, api_reference)
from .sources import resolve_item_source

REQUIRED_FIELDS = (
    ('title', 'title'),
    ('url', 'url'),
    ('name', 'name'),
    ('album_title', 'albumTitle'),
)


def validate_record(record: InputRecord):
    """
    Check that every field of `record` is filled.

    Raises:
        ValidationError: Naming the first empty field.
    """
    for attribute, field_name in REQUIRED_FIELDS:
        if not getattr(record, attribute, None):
            raise ValidationError(f"Invalid record: Empty {field_name}: {record}", field=field_name)


class ItemSubmitter:
    """Turn validated input records into remote items and processing jobs."""

    def __init__(
        self,
        client,
        base_dir='.',
        providers: Optional[Mapping[str, str]] = None,
        api_prefix: str = DEFAULT_API_PREFIX
    ):
        """
        Args:
            client: RemoteClient used for the three remote writes.
            base_dir (str | Path): Directory local source paths are relative to.
            providers (Mapping[str, str]): Domain -> provider reference.
            api_prefix (str): API root used to build resource references.
        """
        self.client = client
        self.base_dir = Path(base_dir)
        self.providers = dict(providers or {})
        self.api_prefix = api_prefix

    def validate(self, record: InputRecord):
        validate_record(record)

    def prepare(self, record: InputRecord) -> PreparedItem:
        """Validate `record` and resolve its media source. No remote call is made."""
        self.validate(record)
        source = resolve_item_source(record.url, self.base_dir, self.providers)
        return PreparedItem(record=record, source=source)

    def submit(
        self,
        record: InputRecord,
        collection: Collection,
        pipeline: Pipeline,
        source=None
    ) -> Submission:
        """
        Create the item, append it to the collection and create its job.

        Args:
            record (InputRecord): The record to import.
            collection (Collection): Shared collection, only appended to.
            pipeline (Pipeline): Shared pipeline the job runs.
            source: Already resolved item source. Resolved from the record
                when None.

        Returns:
            Submission: The created item and job.

        Raises:
            ValidationError: If a record field is empty.
            SourceResolutionError: If the local source file cannot be used.
            RemoteError: If the server rejects one of the writes.
        """
        if source is None:
            source = self.prepare(record).source
        else:
            self.validate(record)

        item = self.client.create_item(record.title, record.description, source)
        item_ref = api_reference('items', item.uuid, self.api_prefix)
        logging.debug(f'"{record.title}" - Item created: {item.uuid}')

        # Partial update carrying only the new reference
        self.client.append_to_collection(collection.uuid, item_ref)

        job = self.client.create_job(
            api_reference('experiences', pipeline.uuid, self.api_prefix),
            api_reference('selections', collection.uuid, self.api_prefix),
            item_ref,
            JobStatus.PENDING
        )
        logging.info(f'"{record.title}" - Task created: {job.uuid}')

        return Submission(item=item, job=job)
