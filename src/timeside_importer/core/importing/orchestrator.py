# -*- coding: utf-8 -*-
"""
Batch orchestration of an import run.

The shared collection and pipeline are reconciled once, then every record
goes through its own pipeline (submit, then poll) on a thread pool. A failure
in one item is captured on its future and reported in the summary; it never
cancels the other items. The run returns once every item has an outcome.
"""

import time
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Mapping, Optional, Sequence

from tqdm.auto import tqdm

from .errors import EmptyBatchError, RemoteError
from .models import (DEFAULT_API_PREFIX, DEFAULT_PLAYER_URL, Collection,
                     Pipeline, PreparedItem)
from .poll import DEFAULT_BACKOFF_SCHEDULE, JobPoller, PollOutcome
from .resources import ResourceReconciler
from .submit import ItemSubmitter
from .summary import FAILED, SUCCEEDED, TIMED_OUT, BatchSummary, ItemOutcome

# Above this many records, one thread per record starts to weigh on the host
LARGE_POOL_SIZE = 256


def build_player_url(player_url: str, item_uuid: str) -> str:
    """Deep link to an item in the TimeSide player."""
    return f"{player_url.rstrip('/')}/#/item/{item_uuid}"


def failed_outcome(title: str, error: Exception, **kwargs) -> ItemOutcome:
    return ItemOutcome(
        title=title,
        status=FAILED,
        error=str(error),
        error_type=type(error).__name__,
        **kwargs
    )


class BatchOrchestrator:
    """Import a batch of records into the remote platform."""

    def __init__(
        self,
        client,
        collection_title: str,
        pipeline_title: str,
        presets: Sequence[str],
        base_dir='.',
        providers: Optional[Mapping[str, str]] = None,
        player_url: str = DEFAULT_PLAYER_URL,
        api_prefix: str = DEFAULT_API_PREFIX,
        backoff_schedule: Sequence[float] = DEFAULT_BACKOFF_SCHEDULE,
        stop_on_failed: bool = False,
        max_workers: Optional[int] = None,
        show_progress: bool = False,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.client = client
        self.collection_title = collection_title
        self.pipeline_title = pipeline_title
        self.presets = tuple(presets)
        self.player_url = player_url
        self.max_workers = max_workers
        self.show_progress = show_progress

        self.reconciler = ResourceReconciler(client)
        self.submitter = ItemSubmitter(client, base_dir=base_dir, providers=providers, api_prefix=api_prefix)
        self.poller = JobPoller(client, schedule=backoff_schedule, stop_on_failed=stop_on_failed, sleep=sleep)

    @classmethod
    def from_config(cls, client, config, base_dir='.', **kwargs) -> 'BatchOrchestrator':
        """Build an orchestrator from an ImporterConfig. Keyword arguments take precedence."""
        options = dict(
            collection_title=config.collection_title,
            pipeline_title=config.pipeline_title,
            presets=config.presets,
            providers=config.providers,
            player_url=config.player_url,
            api_prefix=config.api_prefix,
            backoff_schedule=config.backoff_schedule,
            stop_on_failed=config.stop_on_failed,
            max_workers=config.max_workers,
        )
        options.update(kwargs)
        return cls(client, base_dir=base_dir, **options)

    def _resolve_workers(self, n_items: int) -> int:
        # One worker per item so that every pipeline polls concurrently
        if self.max_workers is None:
            if n_items > LARGE_POOL_SIZE:
                logging.warning(
                    f"Starting {n_items} worker threads, one per item. "
                    "Set max_workers to bound the pool (pending items then wait for a free worker)."
                )
            return max(1, n_items)
        return max(1, min(self.max_workers, n_items))

    def ensure_resources(self):
        """Reconcile the shared collection and pipeline. Errors abort the run."""
        collection = self.reconciler.ensure_collection(self.collection_title)
        logging.info(f"{self.collection_title} Selection: {collection.uuid}")
        pipeline = self.reconciler.ensure_pipeline(self.pipeline_title, self.presets)
        logging.info(f"{self.pipeline_title} Experience: {pipeline.uuid}")
        return collection, pipeline

    def import_item(self, prepared: PreparedItem, collection: Collection, pipeline: Pipeline) -> ItemOutcome:
        """
        Submit one prepared record and wait for its job.

        Submission errors propagate to the caller. Once the job exists, a
        failure of the first status check is reported as a failed outcome
        carrying the job identifier.
        """
        record = prepared.record
        submission = self.submitter.submit(record, collection, pipeline, source=prepared.source)
        item, job = submission.item, submission.job

        try:
            result = self.poller.await_terminal(job, label=record.title)
        except RemoteError as e:
            logging.warning(f'"{record.title}" - Unable to get result for task "{job.uuid}": {e}')
            return failed_outcome(record.title, e, job_uuid=job.uuid, item_uuid=item.uuid)

        final_status = result.final_status.name if result.final_status is not None else None
        common = dict(
            title=record.title,
            job_uuid=job.uuid,
            item_uuid=item.uuid,
            elapsed=result.elapsed,
            final_status=final_status,
        )

        if result.outcome == PollOutcome.DONE:
            player_url = build_player_url(self.player_url, item.uuid)
            logging.info(f'"{record.title}" - Task done ({round(result.elapsed * 1000)}ms) : {job.uuid}')
            logging.info(f'"{record.title}" - Player URL: {player_url}')
            return ItemOutcome(status=SUCCEEDED, player_url=player_url, **common)

        if result.outcome == PollOutcome.FAILED:
            return ItemOutcome(status=FAILED, error=f"Task {job.uuid} failed", error_type='JobFailed', **common)

        return ItemOutcome(status=TIMED_OUT, **common)

    def run(self, records) -> BatchSummary:
        """
        Import every record.

        Args:
            records (Sequence[InputRecord]): The batch, in input order.

        Returns:
            BatchSummary: One outcome per record, in input order.

        Raises:
            EmptyBatchError: If `records` is empty. No remote call is made.
            ResourceCreationError: If the shared resources cannot be
                established. No item is submitted.
        """
        records = list(records)
        if not records:
            raise EmptyBatchError("Unexpected empty record list. Nothing to import.")

        collection, pipeline = self.ensure_resources()

        outcomes = [None] * len(records)
        prepared = {}
        n_workers = self._resolve_workers(len(records))

        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            # Validate and resolve sources, no remote call involved
            future_to_index = {
                executor.submit(self.submitter.prepare, record): index
                for index, record in enumerate(records)
            }
            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    prepared[index] = future.result()
                except Exception as e:
                    logging.error(f'"{records[index].title}" - Rejected: {e}')
                    outcomes[index] = failed_outcome(records[index].title, e)

            logging.info(f"Parsed {len(records)} items, {len(prepared)} valid. Importing...")

            future_to_index = {
                executor.submit(self.import_item, prepared[index], collection, pipeline): index
                for index in sorted(prepared)
            }
            progress = tqdm(
                as_completed(future_to_index),
                total=len(future_to_index),
                desc="Importing items",
                disable=not self.show_progress
            )
            for future in progress:
                index = future_to_index[future]
                try:
                    outcomes[index] = future.result()
                except Exception as e:
                    logging.error(f'"{records[index].title}" - Import failed: {e}')
                    outcomes[index] = failed_outcome(records[index].title, e)

        summary = BatchSummary(
            collection_uuid=collection.uuid,
            pipeline_uuid=pipeline.uuid,
            items=outcomes
        )
        logging.info(
            f"Import complete: {summary.submitted} submitted, {summary.succeeded} succeeded, "
            f"{summary.timed_out} timed out, {summary.failed} failed."
        )
        return summary
