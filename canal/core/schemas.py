"""Core data models for the job canal dashboard.

Every model is frozen. Filter state changes go through the ``with_*`` /
``toggle`` helpers, which return a new FilterState instead of mutating.
"""

import re
from datetime import date
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Categorical record fields that can be grouped on or used as inclusion sets.
GroupField = Literal["employer", "location", "status", "category"]
InclusionField = Literal["employer", "location", "status"]

INCLUSION_ATTRS: dict[str, str] = {
    "employer": "employers",
    "location": "locations",
    "status": "statuses",
}

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_iso_date(value: str) -> date | None:
    """Parse a strict YYYY-MM-DD string; anything else yields None."""
    value = value.strip()
    if not _ISO_DATE.fullmatch(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


class WageBand(str, Enum):
    """Mutually exclusive wage selectors."""

    LISTED = "listed"
    NOT_LISTED = "not_listed"
    ABOVE_150K = "150k+"
    FROM_100K_TO_150K = "100k-150k"
    FROM_50K_TO_100K = "50k-100k"
    UNDER_50K = "under-50k"


class JobRecord(BaseModel):
    """One job posting as loaded from the upstream jobs.json export.

    Accepts both the upstream camelCase keys and the snake_case field names.
    ``date_posted`` is kept as the raw string; parsing happens in the pipeline
    so a malformed date is reported rather than rejected at load time.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str = Field(default="", alias="jobTitle")
    employer: str = ""
    location: str = ""
    date_posted: str = Field(default="", alias="datePosted")
    status: str = ""
    wage: float | None = Field(default=None, ge=0)
    category: str = ""
    occupation_name: str = Field(default="", alias="occupationName")
    source_occupation_code: str = Field(default="", alias="soc")
    posting_url: str = Field(default="", alias="url")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> str:
        if v is None or (isinstance(v, str) and not v.strip()):
            msg = "id must not be empty"
            raise ValueError(msg)
        return str(v).strip()

    @field_validator(
        "title", "employer", "location", "date_posted", "status", "category",
        "occupation_name", "source_occupation_code", "posting_url",
        mode="before",
    )
    @classmethod
    def null_to_empty(cls, v: object) -> object:
        return "" if v is None else v

    @property
    def has_wage(self) -> bool:
        return self.wage is not None and self.wage > 0

    @property
    def posted_on(self) -> date | None:
        """Parsed posting date, or None when ``date_posted`` is not YYYY-MM-DD."""
        return parse_iso_date(self.date_posted)


class FilterState(BaseModel):
    """The criteria currently applied to the record store.

    An inclusion set of ``None`` means "no restriction". An empty frozenset
    means the user excluded every value and nothing survives that dimension.
    """

    model_config = ConfigDict(frozen=True)

    active_category: str | None = None
    employers: frozenset[str] | None = None
    locations: frozenset[str] | None = None
    statuses: frozenset[str] | None = None
    wage_band: WageBand | None = None
    date_from: date | None = None
    date_to: date | None = None
    query: str = ""

    def selection(self, field: InclusionField) -> frozenset[str] | None:
        return getattr(self, _inclusion_attr(field))

    def with_category(self, category: str | None) -> "FilterState":
        """Switch category; inclusion sets are reset since their universe changes."""
        return self.model_copy(
            update={
                "active_category": category,
                "employers": None,
                "locations": None,
                "statuses": None,
            }
        )

    def toggle(
        self,
        field: InclusionField,
        value: str,
        universe: frozenset[str],
    ) -> "FilterState":
        """Add or remove ``value`` from an inclusion set.

        ``universe`` is the set of options available under the active
        category. A selection equal to the universe collapses back to None.
        """
        current = self.selection(field)
        selected = universe if current is None else current
        updated = selected - {value} if value in selected else selected | {value}
        return self._with_selection(field, updated, universe)

    def select_only(
        self,
        field: InclusionField,
        values: frozenset[str],
        universe: frozenset[str],
    ) -> "FilterState":
        return self._with_selection(field, frozenset(values), universe)

    def select_all(self, field: InclusionField) -> "FilterState":
        return self.model_copy(update={_inclusion_attr(field): None})

    def with_wage_band(self, band: WageBand | None) -> "FilterState":
        return self.model_copy(update={"wage_band": band})

    def with_dates(self, date_from: date | None, date_to: date | None) -> "FilterState":
        return self.model_copy(update={"date_from": date_from, "date_to": date_to})

    def with_query(self, query: str) -> "FilterState":
        return self.model_copy(update={"query": query})

    def cleared(self) -> "FilterState":
        """Drop every column filter but keep the active category."""
        return FilterState(active_category=self.active_category)

    def _with_selection(
        self,
        field: InclusionField,
        selected: frozenset[str],
        universe: frozenset[str],
    ) -> "FilterState":
        value = None if selected == universe else selected
        return self.model_copy(update={_inclusion_attr(field): value})


def _inclusion_attr(field: str) -> str:
    try:
        return INCLUSION_ATTRS[field]
    except KeyError:
        msg = f"unknown inclusion field: {field!r}"
        raise ValueError(msg) from None


class FilteredView(BaseModel):
    """Result of the filter pipeline."""

    model_config = ConfigDict(frozen=True)

    records: tuple[JobRecord, ...] = ()
    skipped_ids: tuple[str, ...] = ()


class GroupCount(BaseModel):
    """One (value, count) pair of a group-by ranking."""

    model_config = ConfigDict(frozen=True)

    value: str
    count: int = Field(ge=0)


class AggregateResult(BaseModel):
    """Scalar statistics over a record subset.

    ``avg_wage`` is 0 when no record lists a wage; render that as "no data".
    """

    model_config = ConfigDict(frozen=True)

    total: int = 0
    employers: int = 0
    avg_wage: int = 0
    with_wage: int = 0


class PhraseCount(BaseModel):
    """A salient title phrase and the number of distinct postings containing it."""

    model_config = ConfigDict(frozen=True)

    phrase: str
    support: int = Field(ge=1)


class FreshnessBucket(BaseModel):
    """One recency band of the freshness histogram."""

    model_config = ConfigDict(frozen=True)

    label: str
    count: int = Field(ge=0)


class FreshnessResult(BaseModel):
    """Ordered freshness bands plus the ids whose posting date could not be parsed."""

    model_config = ConfigDict(frozen=True)

    buckets: tuple[FreshnessBucket, ...] = ()
    skipped_ids: tuple[str, ...] = ()

    @property
    def total(self) -> int:
        return sum(b.count for b in self.buckets)


class DashboardView(BaseModel):
    """Everything the presentation layer needs for one filter state."""

    model_config = ConfigDict(frozen=True)

    state: FilterState
    reference_date: date
    records: tuple[JobRecord, ...] = ()
    stats: AggregateResult = Field(default_factory=AggregateResult)
    top_employers: tuple[GroupCount, ...] = ()
    categories: tuple[GroupCount, ...] = ()
    phrases: tuple[PhraseCount, ...] = ()
    freshness: tuple[FreshnessBucket, ...] = ()
    skipped_ids: tuple[str, ...] = ()
