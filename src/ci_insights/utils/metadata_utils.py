"""
This module loads the test-run metadata that client projects push into the
reports tree, laid out as `{reports_dir}/{project}/{timestamp}/metadata.json`.

It includes functions for:
1.  **Enumerating a project's history**: Every run directory is visited and its
    metadata parsed. Missing or unreadable files are skipped, so one broken
    upload never blocks a trend analysis.
2.  **Loading a specific run**: The requested run must exist and parse;
    anything else is a `NotFoundError`.
3.  **Finding the previous run**: The run directly older than a given
    timestamp, used as the baseline for the pass-rate delta.
"""

import json
import logging
import os
from typing import List, Optional

from pydantic import ValidationError

from ... import constants
from .exceptions import NotFoundError
from .models import MetadataRecord
from .storage import Storage

logger = logging.getLogger(__name__)


def parse_metadata(content: str, run_name: str) -> MetadataRecord:
    """
    Parses the JSON content of a `metadata.json` file.

    Args:
        content: The raw file content.
        run_name: The run directory name, used as the timestamp when the
            record does not carry one.

    Raises:
        ValueError: If the content is not a JSON object or has invalid fields.
    """
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError("metadata must be a JSON object")
    try:
        record = MetadataRecord.model_validate(data)
    except ValidationError as e:
        raise ValueError(str(e)) from e
    if not record.timestamp:
        record = record.model_copy(update={"timestamp": run_name})
    return record


def _project_dir(storage: Storage, reports_dir: str, project: str) -> str:
    project_dir = os.path.join(reports_dir, project)
    if not storage.is_dir(project_dir):
        raise NotFoundError(f"Project directory not found: {project_dir}")
    return project_dir


def list_run_names(storage: Storage, reports_dir: str, project: str) -> List[str]:
    """Returns the run directory names of a project, oldest first."""
    return sorted(storage.list_dirs(_project_dir(storage, reports_dir, project)))


def load_project_reports(
    storage: Storage, reports_dir: str, project: str
) -> List[MetadataRecord]:
    """
    Loads every readable metadata record of a project, oldest first.

    Run directories without a metadata file, or whose file cannot be parsed,
    are skipped without raising.

    Raises:
        NotFoundError: If the project directory does not exist.
    """
    project_dir = _project_dir(storage, reports_dir, project)
    records = []
    for run_name in storage.list_dirs(project_dir):
        metadata_path = os.path.join(project_dir, run_name, constants.METADATA_FILENAME)
        if not storage.exists(metadata_path):
            logger.debug(f"Skipping {run_name}: no {constants.METADATA_FILENAME}")
            continue
        try:
            records.append(parse_metadata(storage.read_text(metadata_path), run_name))
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping unreadable metadata {metadata_path}: {e}")

    records.sort(key=lambda r: r.timestamp or "")
    logger.info(f"Loaded {len(records)} report(s) for project '{project}'.")
    return records


def load_report(
    storage: Storage, reports_dir: str, project: str, timestamp: str
) -> MetadataRecord:
    """
    Loads the metadata record of one specific run.

    Raises:
        NotFoundError: If the metadata file is missing or cannot be parsed.
    """
    metadata_path = os.path.join(
        reports_dir, project, timestamp, constants.METADATA_FILENAME
    )
    if not storage.exists(metadata_path):
        raise NotFoundError(f"Metadata not found: {metadata_path}")
    try:
        return parse_metadata(storage.read_text(metadata_path), timestamp)
    except (OSError, ValueError) as e:
        raise NotFoundError(f"Metadata unreadable: {metadata_path}: {e}") from e


def find_previous_report(
    storage: Storage, reports_dir: str, project: str, timestamp: str
) -> Optional[MetadataRecord]:
    """
    Finds the run immediately older than `timestamp`.

    Run directories are ordered newest first and the entry following
    `timestamp` is taken. Returns None when `timestamp` is the oldest run, or
    when the previous run has no readable metadata.
    """
    run_names = sorted(list_run_names(storage, reports_dir, project), reverse=True)
    if timestamp not in run_names:
        return None
    index = run_names.index(timestamp)
    if index + 1 >= len(run_names):
        logger.info(f"No report older than {timestamp}; using a zero baseline.")
        return None

    previous_name = run_names[index + 1]
    try:
        return load_report(storage, reports_dir, project, previous_name)
    except NotFoundError as e:
        logger.warning(f"Previous report {previous_name} unusable ({e}); using a zero baseline.")
        return None
