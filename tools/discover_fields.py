#!/usr/bin/env python3
"""Discover AcroForm field names in a fillable PDF.

Usage:
    python tools/discover_fields.py <pdf_path>
    python tools/discover_fields.py sample-forms/FormTemplate.pdf

Outputs each field's fully-qualified name, type, /Ff flags and current value
(if any). These are the names to use as keys of a value file.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from pdf_forms_filler import FormNotFoundError, TemplateNotFoundError, list_fields  # noqa: E402


def discover_fields(pdf_path: str) -> None:
    """Print all AcroForm fields found in a PDF."""
    path = Path(pdf_path)
    try:
        fields = list_fields(path)
    except TemplateNotFoundError:
        print(f"Error: File not found: {pdf_path}")
        sys.exit(1)
    except FormNotFoundError:
        print(f"No AcroForm found in {path.name}.")
        return

    if not fields:
        print(f"No AcroForm fields found in {path.name}.")
        print("This PDF may use XFA forms, which are not supported.")
        return

    print(f"Found {len(fields)} fields in {path.name}:")
    print("-" * 90)
    print(f"{'#':<5} {'Field Name':<50} {'Type':<12} {'Flags':<10} {'Value'}")
    print("-" * 90)

    for i, info in enumerate(sorted(fields, key=lambda f: f.name), 1):
        value = "" if info.value is None else str(info.value)[:40]
        print(f"{i:<5} {info.name:<50} {info.kind:<12} {info.flags:<10} {value}")

    print("-" * 90)
    print(f"\nTotal: {len(fields)} fields")


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    discover_fields(sys.argv[1])


if __name__ == "__main__":
    main()
