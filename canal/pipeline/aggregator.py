"""Aggregate statistics and group-by rankings over a record subset."""

from collections.abc import Sequence
from typing import get_args

from canal.core.schemas import AggregateResult, GroupCount, GroupField, JobRecord

GROUP_FIELDS = frozenset(get_args(GroupField))


def unique_count(records: Sequence[JobRecord], field: GroupField) -> int:
    """Number of distinct values of ``field`` (value equality)."""
    _check_field(field)
    return len({getattr(r, field) for r in records})


def avg_wage(records: Sequence[JobRecord]) -> int:
    """Mean listed wage rounded to the nearest integer, or 0 with no listed wage.

    Halves round away from zero, e.g. 100000.5 -> 100001.
    """
    wages = [r.wage for r in records if r.has_wage and r.wage is not None]
    if not wages:
        return 0
    return int(sum(wages) / len(wages) + 0.5)


def stats(records: Sequence[JobRecord]) -> AggregateResult:
    """Scalar statistics for the stat cards."""
    return AggregateResult(
        total=len(records),
        employers=unique_count(records, "employer"),
        avg_wage=avg_wage(records),
        with_wage=sum(1 for r in records if r.has_wage),
    )


def rank(records: Sequence[JobRecord], field: GroupField) -> list[GroupCount]:
    """Group-by counts sorted by count desc; ties keep first-seen order."""
    _check_field(field)
    counts: dict[str, int] = {}
    for r in records:
        value = getattr(r, field)
        counts[value] = counts.get(value, 0) + 1
    # dict preserves insertion (first-seen) order and sorted() is stable
    ordered = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [GroupCount(value=value, count=count) for value, count in ordered]


def category_counts(records: Sequence[JobRecord]) -> list[GroupCount]:
    """Postings per category over the whole store (the category pill list)."""
    return rank(records, "category")


def available_options(
    records: Sequence[JobRecord],
    category: str | None,
    field: GroupField,
) -> list[str]:
    """Sorted distinct values of ``field`` among records in ``category``."""
    _check_field(field)
    scoped = records if category is None else [r for r in records if r.category == category]
    return sorted({getattr(r, field) for r in scoped})


def _check_field(field: str) -> None:
    if field not in GROUP_FIELDS:
        msg = f"cannot group on field {field!r}; expected one of {sorted(GROUP_FIELDS)}"
        raise ValueError(msg)
