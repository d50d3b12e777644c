#!/usr/bin/env python3
"""Syllabus to study calendar converter.

Turns a saved AI syllabus response (and optionally a saved study plan
response) into class meeting and study session blocks, written as an
iCalendar (.ics) file or as JSON rows.
"""

import argparse
import dataclasses
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from ingestion import InMemoryStore, coerce_plan, coerce_syllabus, extract_json
from logging_setup import configure_logging
from scheduler import generate, merge, sort_chronologically
from transformer import ICalTransformer, JsonTransformer

logger = logging.getLogger("syllabus2cal")

OUTPUT_FORMATS = ("ics", "json")


def parse_date(date_str: str) -> date:
    """Parse date string in YYYY-MM-DD format."""
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid date format: '{date_str}'. Expected YYYY-MM-DD."
        )


def read_response(path: str) -> str:
    """Read a saved AI response from disk."""
    return Path(path).read_text(encoding="utf-8")


def resolve_output(output: str, output_format: Optional[str]) -> tuple[str, str]:
    """Pick the output format and make sure the path carries its extension.

    Returns:
        Tuple of (output path, format).
    """
    suffix = Path(output).suffix.lower().lstrip(".")
    fmt = output_format or (suffix if suffix in OUTPUT_FORMATS else "ics")
    if suffix != fmt:
        output = f"{output}.{fmt}"
    return output, fmt


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert an AI-parsed syllabus into a study calendar.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 syllabus2cal.py --syllabus parsed.json --class-name "Calculus I"
  python3 syllabus2cal.py --syllabus parsed.json --plan plan.json --start-date 2026-02-23 -o calc.ics
  python3 syllabus2cal.py --syllabus parsed.json --plan plan.json --format json -o blocks
        """
    )

    parser.add_argument(
        "--syllabus",
        required=True,
        help="File holding the syllabus parsing response (JSON, fenced or plain)"
    )

    parser.add_argument(
        "--plan",
        default=None,
        help="File holding the study plan response (JSON array)"
    )

    parser.add_argument("--class-id", default="class", help="Class identifier (default: class)")
    parser.add_argument("--user-id", default="local", help="User identifier (default: local)")
    parser.add_argument("--class-name", default="Class", help="Calendar event title for the class")

    parser.add_argument(
        "--start-date",
        type=parse_date,
        default=None,
        help="Override the term start date (format: YYYY-MM-DD)"
    )

    parser.add_argument(
        "--end-date",
        type=parse_date,
        default=None,
        help="Override the term end date (format: YYYY-MM-DD). "
             "Default: the syllabus dates, else January 15 - May 15"
    )

    parser.add_argument(
        "--timezone",
        default=ICalTransformer.DEFAULT_TIMEZONE,
        help="IANA time zone of the class times (default: UTC)"
    )

    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (default: taken from the output file extension, else ics)"
    )

    parser.add_argument(
        "-o", "--output",
        default="study_plan.ics",
        help="Output file path (default: study_plan.ics)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log recovered anomalies and progress to stderr"
    )

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the converter."""
    args = build_parser().parse_args(argv)
    configure_logging(logging.INFO if args.verbose else None)

    output_path, output_format = resolve_output(args.output, args.format)

    if args.start_date and args.end_date and args.start_date > args.end_date:
        print("Error: Start date must not be after end date.", file=sys.stderr)
        sys.exit(1)

    try:
        parsed = coerce_syllabus(extract_json(read_response(args.syllabus), expect=dict))

        schedule = parsed.schedule
        if schedule is not None and (args.start_date or args.end_date):
            schedule = dataclasses.replace(
                schedule,
                start_date=args.start_date or schedule.start_date,
                end_date=args.end_date or schedule.end_date,
            )
        elif schedule is None:
            print("Warning: No class schedule found in the syllabus.")

        meetings = generate(schedule, args.class_id)
        print(f"Generated {len(meetings)} class meetings.")

        store = InMemoryStore()
        resolved = store.insert_assignments(
            [a.to_row(args.class_id) for a in parsed.assignments]
        )

        sessions = []
        if args.plan:
            sessions = coerce_plan(extract_json(read_response(args.plan), expect=list))

        blocks = sort_chronologically(
            merge(meetings, sessions, resolved, args.class_id, args.user_id)
        )
        print(f"Created {len(blocks)} study blocks.")

        if output_format == "json":
            transformer = JsonTransformer()
        else:
            transformer = ICalTransformer(
                class_name=args.class_name,
                assignment_titles={row["id"]: row["title"] for row in resolved},
                timezone=args.timezone,
            )
        transformer.transform(blocks)
        transformer.save(output_path)

        print(f"Study plan saved to: {output_path}")

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(130)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
