# -*- coding: utf-8 -*-
"""
Exception taxonomy for the batch importer.

Per-item errors (ValidationError, SourceResolutionError, RemoteError) are
caught at the item pipeline boundary and reported in the batch summary.
ResourceCreationError and EmptyBatchError abort the whole batch.
A polling timeout is not an exception, see poll.PollOutcome.
"""


class ImporterError(Exception):
    """Base class for all importer errors."""


class ValidationError(ImporterError):
    """An input record is missing a required field."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field


class SourceResolutionError(ImporterError):
    """The media source of a record cannot be resolved (missing or unreadable file)."""


class EmptyBatchError(ImporterError):
    """The batch contains no input records."""


class RemoteError(ImporterError):
    """
    A call to the remote API was rejected.

    Attributes:
        status (int | None): HTTP status code, None for transport failures.
        body: Decoded error body returned by the server (dict, list or text).
    """

    def __init__(self, message, status=None, body=None):
        super().__init__(message)
        self.status = status
        self.body = body


class RemoteTransportError(RemoteError):
    """The remote API could not be reached, timed out, or answered with a 5xx."""


class ResourceCreationError(ImporterError):
    """A shared resource (collection or pipeline) could not be created or updated."""

    def __init__(self, message, body=None):
        super().__init__(message)
        self.body = body
