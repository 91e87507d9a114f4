# -*- coding: utf-8 -*-

"""
Reading of import files.

An import file lists the records to import, each with the keys `title`,
`url`, `name` and `albumTitle`. Supported formats are a JSON array, JSON Lines,
CSV and Parquet. Rows are not validated here: an incomplete row is reported as
a failed item by the importer, the other rows are still imported.
"""

import logging
from pathlib import Path
from typing import List

import polars as pl

from ..importing.models import InputRecord
from .misc import mask_path, read_json, read_jsonl

RECORD_COLUMNS = ('title', 'url', 'name', 'albumTitle')


def _check_rows(rows, source_file):
    for i, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValueError(f"Expected an object at position {i} of {source_file}, got {type(row).__name__}.")


def read_records_json(source_file) -> List[dict]:
    """Read rows from a JSON file holding an array of objects."""
    rows = read_json(source_file)
    if not isinstance(rows, list):
        raise ValueError(f"Expected a JSON array of records in {source_file}.")
    _check_rows(rows, source_file)
    return rows


def read_records_jsonl(source_file) -> List[dict]:
    """Read rows from a JSON Lines file."""
    rows = read_jsonl(source_file)
    _check_rows(rows, source_file)
    return rows


def read_records_tabular(source_file) -> List[dict]:
    """Read rows from a CSV or PARQUET file."""
    source_file = Path(source_file)
    suffix = source_file.suffix.lower()
    if suffix == '.csv':
        df = pl.read_csv(source_file, infer_schema_length=0)
    elif suffix == '.parquet':
        df = pl.read_parquet(source_file)
    else:
        raise ValueError('Import file must be either CSV or PARQUET')

    missing = [column for column in RECORD_COLUMNS if column not in df.columns]
    if 'albumTitle' in missing and 'album_title' in df.columns:
        missing.remove('albumTitle')
    if missing:
        logging.warning(f"Columns {missing} not found in {mask_path(source_file)}, their records will be rejected.")
    return df.to_dicts()


def read_import_records(source_file) -> List[InputRecord]:
    """
    Read the records of an import file.

    Args:
        source_file (str | Path): JSON, JSONL, CSV or PARQUET file.

    Returns:
        List[InputRecord]: The records in file order.

    Raises:
        ValueError: If the format is unsupported or the content is not a list of records.
        FileNotFoundError: If the file does not exist.
    """
    source_file = Path(source_file)
    if not source_file.exists():
        raise FileNotFoundError(f"Import file not found: {source_file}")

    suffix = source_file.suffix.lower()
    if suffix == '.json':
        rows = read_records_json(source_file)
    elif suffix == '.jsonl':
        rows = read_records_jsonl(source_file)
    elif suffix in ['.csv', '.parquet']:
        rows = read_records_tabular(source_file)
    else:
        raise ValueError("Import file must be a JSON, JSONL, CSV or PARQUET file.")

    logging.info(f"Read {len(rows)} records from {mask_path(source_file)}")
    return [InputRecord.from_dict(row) for row in rows]
