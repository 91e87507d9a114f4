"""
Batch import operations for TimeSide Batch Importer.

Submodules:
    models:       Records, item sources and remote resources
    errors:       Exception taxonomy
    sources:      Media source resolution (providers, URLs, local files)
    resources:    Get-or-create of the shared selection and experience
    submit:       Item, selection membership and task creation
    poll:         Task polling with progressive backoff
    orchestrator: Concurrent import of a whole batch
    summary:      Import summary (counts, per-item outcomes, reports)

Example Usage:
    import timeside_importer as tsi

    reconciler = tsi.importing.resources.ResourceReconciler(client)
    selection = reconciler.ensure_collection('WASABI')

    poller = tsi.importing.poll.JobPoller(client)
    result = poller.await_terminal(job)
"""

# Import submodules (not individual functions)
from . import errors
from . import models
from . import sources
from . import resources
from . import submit
from . import poll
from . import summary
from . import orchestrator

__all__ = [
    'errors',        # tsi.importing.errors.*
    'models',        # tsi.importing.models.*
    'sources',       # tsi.importing.sources.*
    'resources',     # tsi.importing.resources.*
    'submit',        # tsi.importing.submit.*
    'poll',          # tsi.importing.poll.*
    'summary',       # tsi.importing.summary.*
    'orchestrator',  # tsi.importing.orchestrator.*
]
