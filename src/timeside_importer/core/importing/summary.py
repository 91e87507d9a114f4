# -*- coding: utf-8 -*-

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from statistics import mean
from typing import List, Optional

from ..utils.misc import mask_path

SUCCEEDED = 'succeeded'
TIMED_OUT = 'timed_out'
FAILED = 'failed'


@dataclass(frozen=True)
class ItemOutcome:
    """Result of one item pipeline."""
    title: str
    status: str
    job_uuid: Optional[str] = None
    item_uuid: Optional[str] = None
    player_url: Optional[str] = None
    elapsed: Optional[float] = None
    final_status: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def submitted(self) -> bool:
        return self.job_uuid is not None


@dataclass
class BatchSummary:
    """Aggregated outcome of a batch run."""
    collection_uuid: Optional[str] = None
    pipeline_uuid: Optional[str] = None
    items: List[ItemOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def submitted(self) -> int:
        return sum(1 for item in self.items if item.submitted)

    @property
    def succeeded(self) -> int:
        return sum(1 for item in self.items if item.status == SUCCEEDED)

    @property
    def timed_out(self) -> int:
        return sum(1 for item in self.items if item.status == TIMED_OUT)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.items if item.status == FAILED)

    def to_dict(self) -> dict:
        elapsed = [item.elapsed for item in self.items if item.status == SUCCEEDED and item.elapsed is not None]
        return {
            "collection": self.collection_uuid,
            "pipeline": self.pipeline_uuid,
            "counts": {
                "total": self.total,
                "submitted": self.submitted,
                "succeeded": self.succeeded,
                "timed_out": self.timed_out,
                "failed": self.failed,
            },
            "elapsed": {
                "mean": mean(elapsed) if elapsed else 0,
                "max": max(elapsed) if elapsed else 0,
            },
            "items": [asdict(item) for item in self.items],
        }


def _percentage(count, total):
    return (count / total * 100) if total else 0


def format_batch_summary(summary: BatchSummary) -> str:
    """Render a batch summary as text."""
    summary_dict = summary.to_dict()
    counts = summary_dict['counts']
    total = counts['total']

    summary_lines = [
        "=== Import Summary ===",
        f"Collection : {summary_dict['collection']}",
        f"Pipeline   : {summary_dict['pipeline']}",
        f"Avg. task duration : {summary_dict['elapsed']['mean']:.2f} seconds (max: {summary_dict['elapsed']['max']:.2f})",
        "",
        "=== Item Counts ===",
        f"Total     : {total}",
        f"Submitted : {counts['submitted']} ({_percentage(counts['submitted'], total):.2f}%)",
        f"Succeeded : {counts['succeeded']} ({_percentage(counts['succeeded'], total):.2f}%)",
        f"Timed out : {counts['timed_out']} ({_percentage(counts['timed_out'], total):.2f}%)",
        f"Failed    : {counts['failed']} ({_percentage(counts['failed'], total):.2f}%)",
    ]

    succeeded = [item for item in summary.items if item.status == SUCCEEDED]
    if succeeded:
        summary_lines += ["", "=== Succeeded ==="]
        for item in succeeded:
            summary_lines.append(f"- {item.title} ({item.elapsed:.2f}s) task {item.job_uuid}: {item.player_url}")

    timed_out = [item for item in summary.items if item.status == TIMED_OUT]
    if timed_out:
        summary_lines += ["", "=== Timed Out ==="]
        for item in timed_out:
            summary_lines.append(f"- {item.title} task {item.job_uuid} (last status: {item.final_status})")

    failed = [item for item in summary.items if item.status == FAILED]
    if failed:
        summary_lines += ["", "=== Failed ==="]
        for item in failed:
            summary_lines.append(f"- {item.title}: [{item.error_type}] {item.error}")

    return "\n".join(summary_lines)


def save_batch_summary(
    summary: BatchSummary,
    summary_path: Optional[str] = None,
    return_as: Optional[str] = None,
    save_dict: bool = False
):
    """
    Write a batch summary as text and optionally as JSON.

    Args:
        summary (BatchSummary): The summary to save.
        summary_path (str): Path of the text summary. Nothing is written when None.
        return_as (str, optional): If 'dict', returns the summary as a dictionary; if 'print', prints the summary to console.
        save_dict (bool): If True, saves the summary dictionary as a JSON file alongside the summary text.

    Returns:
        dict or None: The summary dictionary if return_as == 'dict', else None.
    """
    text = format_batch_summary(summary)
    summary_dict = summary.to_dict()

    if summary_path is not None:
        with open(summary_path, 'w', encoding='utf-8') as f:
            f.write(text)
        logging.info(f"Import summary saved to {mask_path(summary_path)}")

        if save_dict:
            json_path = Path(summary_path).with_suffix('.json')
            with open(json_path, "w", encoding="utf-8") as jf:
                json.dump(summary_dict, jf, indent=2, ensure_ascii=False)
            logging.info(f"Import summary dict saved to {mask_path(json_path)}")

    if return_as == 'print':
        print(text)

    if return_as == 'dict':
        return summary_dict
