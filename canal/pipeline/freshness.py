"""Recency histogram: partitions a subset into ordered age bands."""

import logging
from collections.abc import Sequence
from datetime import date

from canal.core.config import FreshnessConfig
from canal.core.schemas import FreshnessBucket, FreshnessResult, JobRecord

logger = logging.getLogger(__name__)


def age_in_days(posted: date, reference_date: date) -> int:
    """Whole calendar days between posting and reference date."""
    return (reference_date - posted).days


def band_index(age: int, edges: Sequence[int]) -> int:
    """Index of the band an age falls into; ages past the last edge go last.

    Future-dated postings (negative age) land in the first band.
    """
    for i, edge in enumerate(edges):
        if age <= edge:
            return i
    return len(edges)


def bucketize(
    records: Sequence[JobRecord],
    reference_date: date,
    config: FreshnessConfig | None = None,
) -> FreshnessResult:
    """Count records per age band relative to ``reference_date``.

    Records with an unparseable posting date are left out of every band and
    listed in ``skipped_ids`` instead.
    """
    config = config or FreshnessConfig()
    counts = [0] * (len(config.edges) + 1)
    skipped: list[str] = []

    for r in records:
        posted = r.posted_on
        if posted is None:
            skipped.append(r.id)
            continue
        counts[band_index(age_in_days(posted, reference_date), config.edges)] += 1

    if skipped:
        logger.debug("Freshness: %d records without a valid posting date", len(skipped))

    buckets = tuple(
        FreshnessBucket(label=label, count=count)
        for label, count in zip(config.labels(), counts)
    )
    return FreshnessResult(buckets=buckets, skipped_ids=tuple(skipped))
