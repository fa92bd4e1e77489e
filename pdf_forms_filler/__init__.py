"""Fill PDF AcroForms by rewriting the field tree as an incremental update."""

from .config import FillerConfig, load_config, load_values
from .errors import (
    DuplicateFieldNameError,
    FormFillerError,
    FormNotFoundError,
    TemplateNotFoundError,
    UnsupportedFieldError,
    WriteSessionError,
)
from .form_filler import PdfFormFiller, fill_form, list_fields
from .models import DuplicateNamePolicy, FillReport, RichText, UnsupportedValuePolicy

__all__ = [
    "DuplicateFieldNameError",
    "DuplicateNamePolicy",
    "FillReport",
    "FillerConfig",
    "FormFillerError",
    "FormNotFoundError",
    "PdfFormFiller",
    "RichText",
    "TemplateNotFoundError",
    "UnsupportedFieldError",
    "UnsupportedValuePolicy",
    "WriteSessionError",
    "fill_form",
    "list_fields",
    "load_config",
    "load_values",
]
