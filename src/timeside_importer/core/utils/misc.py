# -*- coding: utf-8 -*-

import os
import json
import logging
from pathlib import Path

import yaml


#=======================================================================
# JSON / YAML Utilities
#=======================================================================

def read_json(path, encoding="utf-8"):
    """
    Reads a JSON file.

    Args:
        path (str): Path to the JSON file.

    Returns:
        dict or list: Parsed JSON content.
    """
    with open(path, 'r', encoding=encoding) as f:
        return json.load(f)


def read_jsonl(path):
    """
    Read a JSON Lines file and return a list of dictionaries.
    Blank lines are skipped.

    Args:
        path (str): Path to the input file.

    Returns:
        list: List of dictionaries read from the file.
    """
    with open(path, 'r', encoding='utf-8') as f:
        return [json.loads(line) for line in f if line.strip()]


def read_yaml(path):
    """Read a YAML file. Returns None for an empty file."""
    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f)


def write_yaml(data, path):
    """Write data to a YAML file, keeping the key order."""
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)


#=======================================================================
# Path Utilities
#=======================================================================

def mask_path(path, base_dir=None):
    """
    Masks or simplifies a path for logging.

    Args:
        path (str): The full path to mask.
        base_dir (str, optional): The base directory to make the path relative to.

    Returns:
        str: The masked or simplified path.
    """
    path = Path(path)

    # Use base_dir if provided, otherwise fallback to PROJECT_DIR from environment
    if base_dir is None:
        base_dir = os.getenv('PROJECT_DIR')

    if base_dir:
        # Make the path relative to the base directory
        base_dir = Path(base_dir)
        try:
            return str(path.relative_to(base_dir))
        except ValueError:
            pass  # If path is not under base_dir, fall back to absolute path

    # Replace home directory with "~"
    try:
        return f"~/{path.relative_to(Path.home())}"
    except (ValueError, RuntimeError):
        return str(path)


def ensure_output_path(path, description="Output folder"):
    """
    Make sure an output directory exists, creating it when missing.

    Args:
        path (str): Directory path.
        description (str): Description of the resource for logging.
    """
    if not os.path.exists(path):
        logging.info(f"{description} does not exist. Creating it at: {mask_path(path)}")
        os.makedirs(path, exist_ok=True)
