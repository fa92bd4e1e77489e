"""Command line entry point for the PDF forms filler."""

import argparse
import logging
import sys
from typing import Dict, List, Optional

from .config import FillerConfig, load_config, load_values
from .errors import FormFillerError
from .form_filler import fill_form, list_fields


def _parse_assignments(assignments: List[str]) -> Dict[str, object]:
    """Turn NAME=VALUE pairs into values; VALUE is read as a YAML scalar."""
    import yaml

    values = {}
    for item in assignments or []:
        name, sep, raw = item.partition("=")
        if not sep:
            raise ValueError(f"Expected NAME=VALUE, got '{item}'")
        values[name] = yaml.safe_load(raw) if raw else ""
    return values


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )


def cmd_fill(args) -> int:
    config = None
    if args.config:
        config = load_config(args.config)
        if config:
            print(f"\nLoaded config: {args.config}")
            print(f"  Unsupported values: {config.unsupported_values.value}")
            print(f"  Duplicate names: {config.duplicate_names.value}")
    config = config or FillerConfig()
    _configure_logging("DEBUG" if args.verbose else config.log_level)

    values = load_values(args.values) if args.values else {}
    values.update(_parse_assignments(args.set))
    if not values:
        print("Warning: no values given, the form is copied unchanged.")

    report = fill_form(args.template, args.output, values, config)

    print(f"\nFilled {len(report.filled)} field(s) into {args.output}")
    if report.appearances:
        print(f"  Regenerated {report.appearances} appearance stream(s)")
    if report.ignored:
        print(f"\nIgnored {len(report.ignored)} value(s) (field cannot take a value):")
        for name in report.ignored:
            print(f"  {name}")
    if report.unmatched:
        print(f"\nNo matching field for {len(report.unmatched)} value(s):")
        for name in report.unmatched:
            print(f"  {name}")
    return 0


def cmd_fields(args) -> int:
    _configure_logging("DEBUG" if args.verbose else "WARNING")
    fields = list_fields(args.template)
    if not fields:
        print(f"No fields found in {args.template}.")
        return 0

    print(f"Found {len(fields)} fields in {args.template}:")
    print("-" * 80)
    print(f"{'#':<5} {'Field Name':<50} {'Type':<12} {'Value'}")
    print("-" * 80)
    for i, info in enumerate(fields, 1):
        value = "" if info.value is None else str(info.value)[:40]
        print(f"{i:<5} {info.name:<50} {info.kind:<12} {value}")
    print("-" * 80)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="PDF Forms Filler - fill AcroForm fields as an incremental update"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log every field decision"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    fill = subparsers.add_parser("fill", help="Fill a form template")
    fill.add_argument("template", help="Path to the fillable PDF")
    fill.add_argument("output", help="Where to write the filled PDF")
    fill.add_argument(
        "--values",
        help="YAML or JSON file mapping qualified field names to values"
    )
    fill.add_argument(
        "--set", action="append", metavar="NAME=VALUE", default=[],
        help="Set one field value (repeatable, overrides --values)"
    )
    fill.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file"
    )
    fill.set_defaults(func=cmd_fill)

    fields = subparsers.add_parser("fields", help="List the fields of a form")
    fields.add_argument("template", help="Path to the fillable PDF")
    fields.set_defaults(func=cmd_fields)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except (FormFillerError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
