"""PDF form filler - writes values into an AcroForm as an incremental update.

Uses pypdf's incremental writer, so the original document bytes are kept
and only the rewritten form objects are appended.

Usage:
    from pdf_forms_filler import PdfFormFiller
    filler = PdfFormFiller("FormTemplate.pdf", "output/FormFilled.pdf")
    report = filler.fill({"Given Name Text Box": "Eric", "Driving License Check Box": True})
"""

import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional

from pypdf import PdfReader, PdfWriter

from .appearance import ResourceLedger
from .config import FillerConfig
from .context import FillContext
from .errors import FormNotFoundError, TemplateNotFoundError
from .fields import FieldInfo, iter_fields
from .locator import locate_form
from .models import FillReport
from .objects import ObjectStore, lookup
from .walker import write_form

logger = logging.getLogger(__name__)


class PdfFormFiller:
    """Fills the AcroForm of one template PDF into an output PDF."""

    def __init__(self, template_path, output_path, config: Optional[FillerConfig] = None):
        template = Path(template_path)
        if not template.exists():
            raise TemplateNotFoundError(template)

        self.template_path = template
        self.output_path = Path(output_path)
        self.config = config or FillerConfig()
        self._writer: Optional[PdfWriter] = None

    def fill(self, values: Mapping[str, Any]) -> FillReport:
        """Fill the form with ``values`` (qualified field name -> value).

        The output is written even when filling fails part way; it must then
        be discarded by the caller.

        Raises:
            FormNotFoundError: the template has no AcroForm.
        """
        if self._writer is None:
            self._open_writer()

        report = FillReport()
        failed = True
        try:
            store = ObjectStore(self._writer)
            session, form = locate_form(store, str(self.template_path))
            ledger = ResourceLedger()
            ctx = FillContext(
                store=store,
                values=dict(values),
                form=form,
                ledger=ledger,
                config=self.config,
                report=report,
            )
            write_form(ctx, session, form)
            ledger.finalize(store)
            failed = False
        finally:
            self._close_writer(failed)

        report.unmatched = [name for name in values if not report.seen(name)]
        for name in report.unmatched:
            logger.warning("No field named '%s' in %s", name, self.template_path.name)
        logger.info("Filled %d field(s) of %s into %s",
                    len(report.filled), self.template_path.name, self.output_path)
        return report

    def _open_writer(self) -> None:
        reader = PdfReader(str(self.template_path))
        self._writer = PdfWriter(reader, incremental=True)

    def _close_writer(self, failed: bool = False) -> None:
        """Write the incremental update, also after a failed fill.

        After a failure, an error while writing is logged so that the
        original exception is the one that propagates.
        """
        writer, self._writer = self._writer, None
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.output_path, "wb") as f:
                writer.write(f)
        except Exception:
            if not failed:
                raise
            logger.exception("Could not write %s after a failed fill", self.output_path)


def fill_form(template_path, output_path, values: Mapping[str, Any],
              config: Optional[FillerConfig] = None) -> FillReport:
    """Fill a PDF form and save it to ``output_path``."""
    return PdfFormFiller(template_path, output_path, config).fill(values)


def list_fields(pdf_path) -> List[FieldInfo]:
    """List the terminal fields of a PDF form, with qualified names.

    Raises:
        TemplateNotFoundError: the file does not exist.
        FormNotFoundError: the PDF has no AcroForm.
    """
    path = Path(pdf_path)
    if not path.exists():
        raise TemplateNotFoundError(path)

    reader = PdfReader(str(path))
    form = lookup(lookup(reader.trailer, "/Root"), "/AcroForm")
    if form is None:
        raise FormNotFoundError(path)
    return list(iter_fields(form))
