"""Record store: loads the static jobs.json collection into frozen records."""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from canal.core.schemas import JobRecord

logger = logging.getLogger(__name__)


def load_records(path: str | Path) -> tuple[JobRecord, ...]:
    """Load and validate records from a JSON array file.

    Invalid entries and duplicate ids are logged and skipped; the first
    occurrence of an id wins.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Data file not found: {path}"
        raise FileNotFoundError(msg)
    raw: Any = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        msg = f"Expected a JSON array of records in {path}"
        raise ValueError(msg)
    return parse_records(raw)


def parse_records(items: list[Any]) -> tuple[JobRecord, ...]:
    """Validate already-decoded record dicts."""
    records: list[JobRecord] = []
    seen: set[str] = set()
    invalid: list[int] = []
    for index, item in enumerate(items):
        try:
            record = JobRecord.model_validate(item)
        except ValidationError as e:
            invalid.append(index)
            logger.debug("Record #%d rejected: %s", index, e)
            continue
        if record.id in seen:
            logger.warning("Duplicate record id '%s' at #%d - skipping", record.id, index)
            continue
        seen.add(record.id)
        records.append(record)

    if invalid:
        logger.warning("Skipped %d invalid records at positions %s", len(invalid), invalid)
    logger.info("Loaded %d records", len(records))
    return tuple(records)
