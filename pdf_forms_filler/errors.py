"""Exceptions raised while filling a PDF form."""


class FormFillerError(Exception):
    """Base class for all form filling failures."""


class TemplateNotFoundError(FormFillerError, FileNotFoundError):
    """The source PDF does not exist."""

    def __init__(self, path):
        self.path = str(path)
        super().__init__(f"PDF template not found: {self.path}")


class FormNotFoundError(FormFillerError):
    """The document catalog has no /AcroForm, so there is nothing to fill."""

    def __init__(self, path=None):
        self.path = str(path) if path is not None else None
        where = f" in {self.path}" if self.path else ""
        super().__init__(f"No AcroForm found{where}")


class WriteSessionError(FormFillerError):
    """An indirect object write session was opened or finished out of order."""


class UnsupportedFieldError(FormFillerError):
    """A value was supplied for a field kind that cannot hold one."""

    def __init__(self, name: str, kind: str):
        self.name = name
        self.kind = kind
        super().__init__(f"Field '{name}' is a {kind} field and cannot be filled")


class DuplicateFieldNameError(FormFillerError):
    """More than one field resolved to the same qualified name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Qualified field name '{name}' matches more than one field")
