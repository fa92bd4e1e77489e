"""Demo: build the sample personal details form, then fill it.

Run:
    python demo.py
"""

import logging
from pathlib import Path

from pdf_forms_filler import PdfFormFiller
from tools.sample_forms import build_sample_form

ROOT = Path(__file__).resolve().parent
TEMPLATE = ROOT / "sample-forms" / "FormTemplate.pdf"
OUTPUT = ROOT / "output" / "FormFilled.pdf"

DATA = {
    "Given Name Text Box": "Eric",
    "Family Name Text Box": "Jones",
    "House nr Text Box": "someplace",
    "Address 1 Text Box": "somewhere 1",
    "Address 2 Text Box": "somewhere 2",
    "Postcode Text Box": "123456",
    "Country Combo Box": "Spain",
    "Height Formatted Field": "198",
    "Driving License Check Box": True,
    "Favourite Colour List Box": "Brown",
    "Language 1 Check Box": True,
    "Language 2 Check Box": True,
    "Language 3 Check Box": False,
    "Language 4 Check Box": False,
    "Language 5 Check Box": True,
    "Gender List Box": "Man",
}


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if not TEMPLATE.exists():
        build_sample_form(TEMPLATE)

    print("=" * 60)
    print("PDF FORMS FILLER DEMO")
    print("=" * 60)
    print(f"Form template: {TEMPLATE}")
    print(f"Output file:   {OUTPUT}")

    filler = PdfFormFiller(TEMPLATE, OUTPUT)
    report = filler.fill(DATA)

    print(f"\nFilled {len(report.filled)} of {len(DATA)} fields "
          f"({report.appearances} appearance streams)")

    # The filler reopens the template for every fill
    DATA["Given Name Text Box"] = "James"
    filler.fill(DATA)
    print("Refilled with Given Name = James")
    print("\nDone!")


if __name__ == "__main__":
    main()
