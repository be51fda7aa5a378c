"""Filter chain over the record store.

Filter order (fixed so runs are reproducible):
  1. CategoryFilter     - equality on the active category
  2. InclusionFilter    - employer, then location, then status membership
  3. WageBandFilter     - one of the mutually exclusive wage bands
  4. DateFromFilter     - inclusive lower bound on the posting date
  5. DateToFilter       - inclusive upper bound on the posting date
  6. TextSearchFilter   - case-insensitive substring on title/employer/location

Every filter returns a new list and is a no-op when its dimension is
unrestricted.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from datetime import date

from canal.core.config import Settings, WageBandsConfig
from canal.core.schemas import (
    FilteredView,
    FilterState,
    InclusionField,
    JobRecord,
    WageBand,
)

logger = logging.getLogger(__name__)

# A filter is a callable that takes records and returns a subset.
Filter = Callable[[list[JobRecord]], list[JobRecord]]

INCLUSION_ORDER: tuple[InclusionField, ...] = ("employer", "location", "status")


class CategoryFilter:
    """Keep only records of the active category (None passes everything)."""

    def __init__(self, category: str | None) -> None:
        self._category = category

    def __call__(self, records: list[JobRecord]) -> list[JobRecord]:
        if self._category is None:
            return list(records)
        result = [r for r in records if r.category == self._category]
        _log_removed(self, records, result)
        return result


class InclusionFilter:
    """Keep records whose field value is a member of the selected set.

    ``universe`` is the set of distinct values in the category-scoped data.
    A selection of None, or one covering the whole universe, is unrestricted.
    """

    def __init__(
        self,
        field: InclusionField,
        selected: frozenset[str] | None,
        universe: frozenset[str],
    ) -> None:
        self._field = field
        self._selected = selected
        self._universe = universe

    @property
    def unrestricted(self) -> bool:
        return self._selected is None or self._selected >= self._universe

    def __call__(self, records: list[JobRecord]) -> list[JobRecord]:
        if self.unrestricted:
            return list(records)
        selected = self._selected or frozenset()
        result = [r for r in records if getattr(r, self._field) in selected]
        _log_removed(self, records, result)
        return result


class WageBandFilter:
    """Keep records whose wage falls in the selected band."""

    def __init__(self, band: WageBand | None, edges: WageBandsConfig | None = None) -> None:
        self._band = band
        self._edges = edges or WageBandsConfig()

    def __call__(self, records: list[JobRecord]) -> list[JobRecord]:
        if self._band is None:
            return list(records)
        result = [r for r in records if self.matches(r)]
        _log_removed(self, records, result)
        return result

    def matches(self, record: JobRecord) -> bool:
        band = self._band
        if band is WageBand.LISTED:
            return record.has_wage
        if band is WageBand.NOT_LISTED:
            return not record.has_wage
        if not record.has_wage:
            return False
        wage = record.wage or 0.0
        edges = self._edges
        if band is WageBand.ABOVE_150K:
            return wage >= edges.upper
        if band is WageBand.FROM_100K_TO_150K:
            return edges.middle <= wage < edges.upper
        if band is WageBand.FROM_50K_TO_100K:
            return edges.lower <= wage < edges.middle
        return wage < edges.lower


class _DateBoundFilter(ABC):
    """Shared plumbing for the two date bounds.

    Records whose posting date cannot be parsed fail an active bound and are
    collected in ``skipped_ids`` so the caller can report them once.
    """

    def __init__(self, bound: date | None) -> None:
        self._bound = bound
        self.skipped_ids: list[str] = []

    def __call__(self, records: list[JobRecord]) -> list[JobRecord]:
        if self._bound is None:
            return list(records)
        result: list[JobRecord] = []
        for r in records:
            posted = r.posted_on
            if posted is None:
                self.skipped_ids.append(r.id)
                continue
            if self._within(posted, self._bound):
                result.append(r)
        _log_removed(self, records, result)
        return result

    @abstractmethod
    def _within(self, posted: date, bound: date) -> bool:
        """Whether a parsed posting date satisfies the bound."""


class DateFromFilter(_DateBoundFilter):
    """Inclusive lower bound."""

    def _within(self, posted: date, bound: date) -> bool:
        return posted >= bound


class DateToFilter(_DateBoundFilter):
    """Inclusive upper bound."""

    def _within(self, posted: date, bound: date) -> bool:
        return posted <= bound


class TextSearchFilter:
    """Keep records whose title, employer or location contains the query."""

    def __init__(self, query: str) -> None:
        self._query = query.lower()

    def __call__(self, records: list[JobRecord]) -> list[JobRecord]:
        if not self._query.strip():
            return list(records)
        result = [r for r in records if self._matches(r)]
        _log_removed(self, records, result)
        return result

    def _matches(self, record: JobRecord) -> bool:
        return any(
            self._query in text.lower()
            for text in (record.title, record.employer, record.location)
        )


def run_filter_chain(
    records: Sequence[JobRecord],
    filters: list[Filter],
) -> list[JobRecord]:
    """Apply filters in order, returning the surviving records."""
    result = list(records)
    for f in filters:
        result = f(result)
    return result


def distinct_values(records: Sequence[JobRecord], field: str) -> frozenset[str]:
    return frozenset(getattr(r, field) for r in records)


def build_filters(
    records: Sequence[JobRecord],
    state: FilterState,
    settings: Settings | None = None,
) -> list[Filter]:
    """Build the filter chain for a filter state (canonical order).

    Inclusion universes are taken from the category-scoped records.
    """
    settings = settings or Settings()
    category_filter = CategoryFilter(state.active_category)
    scoped = category_filter(list(records))

    filters: list[Filter] = [category_filter]
    for field in INCLUSION_ORDER:
        filters.append(
            InclusionFilter(field, state.selection(field), distinct_values(scoped, field))
        )
    filters.extend([
        WageBandFilter(state.wage_band, settings.wage_bands),
        DateFromFilter(state.date_from),
        DateToFilter(state.date_to),
        TextSearchFilter(state.query),
    ])
    return filters


def apply_filters(
    records: Sequence[JobRecord],
    state: FilterState,
    settings: Settings | None = None,
) -> FilteredView:
    """Run the full filter pipeline and collect skipped-record diagnostics."""
    filters = build_filters(records, state, settings)
    result = run_filter_chain(records, filters)

    skipped: list[str] = []
    for f in filters:
        if isinstance(f, _DateBoundFilter):
            skipped.extend(f.skipped_ids)
    skipped_ids = tuple(dict.fromkeys(skipped))

    logger.debug("Filter pipeline: %d of %d records kept", len(result), len(records))
    return FilteredView(records=tuple(result), skipped_ids=skipped_ids)


def _log_removed(f: object, before: list[JobRecord], after: list[JobRecord]) -> None:
    removed = len(before) - len(after)
    if removed:
        logger.debug("%s: removed %d records", type(f).__name__, removed)
