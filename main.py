"""CLI entry point for the job canal dashboard core."""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from canal.core.config import Settings
from canal.core.schemas import DashboardView, FilterState, JobRecord, WageBand
from canal.core.store import load_records
from canal.pipeline.aggregator import available_options, category_counts
from canal.pipeline.orchestrator import (
    build_view,
    export_filename,
    export_records_csv,
    export_view_json,
    format_currency,
)


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    parser.add_argument("--data", help="Path to jobs JSON (overrides data.path in config)")
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def _add_filter_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--category", help="Restrict to a single category")
    parser.add_argument("--employer", action="append", help="Keep only this employer (repeatable)")
    parser.add_argument("--location", action="append", help="Keep only this location (repeatable)")
    parser.add_argument("--status", action="append", help="Keep only this status (repeatable)")
    parser.add_argument(
        "--wage-band",
        choices=[b.value for b in WageBand],
        help="Wage band selector",
    )
    parser.add_argument("--date-from", type=date.fromisoformat, help="Earliest posting date (YYYY-MM-DD)")
    parser.add_argument("--date-to", type=date.fromisoformat, help="Latest posting date (YYYY-MM-DD)")
    parser.add_argument("--query", default="", help="Free-text search on title/employer/location")
    parser.add_argument(
        "--reference-date",
        type=date.fromisoformat,
        help="Date freshness is measured from (default: today)",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Job canal - filter a job posting collection and summarize it",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- summary subcommand (default) ---
    summary_parser = subparsers.add_parser("summary", help="Print stats, phrases and freshness")
    _add_common_args(summary_parser)
    _add_filter_args(summary_parser)
    summary_parser.add_argument(
        "--export",
        choices=["json"],
        help="Print the full view in this format instead of the text summary",
    )

    # --- export-csv subcommand ---
    csv_parser = subparsers.add_parser("export-csv", help="Write the filtered records as CSV")
    _add_common_args(csv_parser)
    _add_filter_args(csv_parser)
    csv_parser.add_argument("--output", help="Output CSV path (default: <prefix>-<date>.csv)")

    argv = list(sys.argv[1:] if argv is None else argv)
    # Default to summary when no subcommand given
    if not argv or argv[0] not in (*subparsers.choices, "-h", "--help"):
        argv = ["summary", *argv]
    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(args: argparse.Namespace) -> Settings:
    """Settings from --config; the default path may be absent."""
    config_path = Path(args.config)
    if not config_path.exists() and args.config == "config/settings.yaml":
        return Settings()
    return Settings.from_yaml(config_path)


def build_state(args: argparse.Namespace, records: tuple[JobRecord, ...]) -> FilterState:
    """Translate CLI filter flags into a FilterState."""
    state = FilterState().with_category(args.category)
    for field, values in (
        ("employer", args.employer),
        ("location", args.location),
        ("status", args.status),
    ):
        if values:
            universe = frozenset(available_options(records, args.category, field))
            state = state.select_only(field, frozenset(values), universe)
    if args.wage_band:
        state = state.with_wage_band(WageBand(args.wage_band))
    return state.with_dates(args.date_from, args.date_to).with_query(args.query)


def print_summary(view: DashboardView, records: tuple[JobRecord, ...]) -> None:
    s = view.stats
    print(f"Total postings: {s.total} (of {len(records)})")
    print(f"Employers:      {s.employers}")
    print(f"Average wage:   {format_currency(s.avg_wage)} ({s.with_wage} postings with salary)")

    print("\nCategories:")
    for g in category_counts(records):
        marker = "*" if g.value == view.state.active_category else " "
        print(f" {marker} {g.value}: {g.count}")

    print("\nTop employers:")
    for g in view.top_employers[:10]:
        print(f"  {g.value}: {g.count}")

    print("\nTitle phrases:")
    if not view.phrases:
        print("  (none)")
    for p in view.phrases:
        print(f"  {p.phrase}: {p.support}")

    print(f"\nFreshness (as of {view.reference_date.isoformat()}):")
    for b in view.freshness:
        print(f"  {b.label}: {b.count}")

    if view.skipped_ids:
        print(f"\nSkipped (invalid posting date): {', '.join(view.skipped_ids)}")


def cmd_summary(args: argparse.Namespace, settings: Settings) -> None:
    """Handle summary subcommand."""
    records = load_records(args.data or settings.data.path)
    state = build_state(args, records)
    view = build_view(records, state, args.reference_date or date.today(), settings)
    if args.export == "json":
        print(export_view_json(view))
        return
    print_summary(view, records)


def cmd_export_csv(args: argparse.Namespace, settings: Settings) -> None:
    """Handle export-csv subcommand."""
    records = load_records(args.data or settings.data.path)
    state = build_state(args, records)
    reference_date = args.reference_date or date.today()
    view = build_view(records, state, reference_date, settings)

    output = Path(args.output or export_filename(settings.export.filename_prefix, reference_date))
    output.parent.mkdir(parents=True, exist_ok=True)
    text = export_records_csv(view.records, settings.wage_bands.high_tier)
    output.write_text(text, encoding="utf-8")
    print(f"Wrote {len(view.records)} records to {output}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "export-csv":
            cmd_export_csv(args, settings)
        else:
            cmd_summary(args, settings)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
