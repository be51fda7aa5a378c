"""Orchestrator: wires the filter chain into the derived dashboard outputs.

Data flow:
  1. Filter pipeline -> filtered subset (+ date diagnostics)
  2. Aggregator      -> stats, employer ranking, category ranking
  3. Phrase miner    -> salient title phrases
  4. Bucketizer      -> freshness histogram (+ date diagnostics)
  5. Diagnostics merged and logged once
"""

import csv
import io
import json
import logging
from collections.abc import Sequence
from datetime import date

from canal.core.config import DEFAULT_EXPORT_PREFIX, Settings
from canal.core.schemas import DashboardView, FilterState, JobRecord
from canal.pipeline.aggregator import rank, stats
from canal.pipeline.freshness import bucketize
from canal.pipeline.matcher import apply_filters
from canal.pipeline.phrases import extract_phrases

logger = logging.getLogger(__name__)

CSV_COLUMNS: tuple[tuple[str, str], ...] = (
    ("id", "ID"),
    ("title", "Job Title"),
    ("employer", "Employer"),
    ("location", "Location"),
    ("date_posted", "Date Posted"),
    ("status", "Status"),
    ("wage", "Wage"),
    ("category", "Category"),
    ("occupation_name", "Occupation"),
    ("source_occupation_code", "SOC"),
    ("posting_url", "URL"),
)

TIER_COLUMN = "Wage Tier"
NO_DATA = "—"


def build_view(
    records: Sequence[JobRecord],
    state: FilterState,
    reference_date: date,
    settings: Settings | None = None,
) -> DashboardView:
    """Compute every derived output for one filter state.

    Pure: the same (records, state, reference_date, settings) always yields an
    identical view.
    """
    settings = settings or Settings()

    filtered = apply_filters(records, state, settings)
    subset = filtered.records

    freshness = bucketize(subset, reference_date, settings.freshness)
    skipped_ids = tuple(dict.fromkeys(filtered.skipped_ids + freshness.skipped_ids))
    if skipped_ids:
        logger.warning(
            "%d records with an invalid posting date were excluded from date "
            "handling: %s",
            len(skipped_ids), ", ".join(skipped_ids),
        )

    view = DashboardView(
        state=state,
        reference_date=reference_date,
        records=subset,
        stats=stats(subset),
        top_employers=tuple(rank(subset, "employer")),
        categories=tuple(rank(subset, "category")),
        phrases=tuple(extract_phrases(subset, settings.phrases)),
        freshness=freshness.buckets,
        skipped_ids=skipped_ids,
    )
    logger.info(
        "View: %d of %d records, %d employers, %d phrases",
        view.stats.total, len(records), view.stats.employers, len(view.phrases),
    )
    return view


def format_currency(amount: float) -> str:
    """'$120,000'; 0 renders as the no-data placeholder."""
    if amount == 0:
        return NO_DATA
    return f"${round(amount):,}"


def wage_tier(wage: float | None, high_tier: float = 120_000) -> str:
    """Badge tier for a single wage: 'none', 'mid' or 'high'."""
    if wage is None or wage == 0:
        return "none"
    return "high" if wage >= high_tier else "mid"


def export_filename(prefix: str = DEFAULT_EXPORT_PREFIX, day: date | None = None) -> str:
    """CSV file name for an export taken on ``day``."""
    return f"{prefix}-{(day or date.today()).isoformat()}.csv"


def export_records_csv(records: Sequence[JobRecord], high_tier: float = 120_000) -> str:
    """Export the filtered subset as CSV text (missing wage -> empty cell).

    A trailing "Wage Tier" column carries the badge tier of each wage, with
    ``high_tier`` as the mid/high cut-off.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow([*(header for _, header in CSV_COLUMNS), TIER_COLUMN])
    for r in records:
        row = []
        for attr, _ in CSV_COLUMNS:
            value = getattr(r, attr)
            if attr == "wage":
                value = "" if value is None else _format_number(value)
            row.append(value)
        row.append(wage_tier(r.wage, high_tier))
        writer.writerow(row)
    return buf.getvalue()


def export_view_json(view: DashboardView) -> str:
    """Export a dashboard view as a JSON string."""
    data = {
        "reference_date": view.reference_date.isoformat(),
        "filters": _state_json(view.state),
        "stats": view.stats.model_dump(),
        "top_employers": [g.model_dump() for g in view.top_employers],
        "categories": [g.model_dump() for g in view.categories],
        "phrases": [p.model_dump() for p in view.phrases],
        "freshness": [b.model_dump() for b in view.freshness],
        "skipped_ids": list(view.skipped_ids),
        "records": [r.model_dump() for r in view.records],
    }
    return json.dumps(data, indent=2)


def _state_json(state: FilterState) -> dict[str, object]:
    data = state.model_dump(mode="json")
    # sets have no stable order; sort so repeated exports are identical
    for key in ("employers", "locations", "statuses"):
        value = getattr(state, key)
        data[key] = None if value is None else sorted(value)
    return data


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
