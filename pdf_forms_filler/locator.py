"""Find the AcroForm and open the write session for it."""

import logging
from typing import Optional, Tuple

from pypdf.generic import DictionaryObject, IndirectObject, NameObject

from .errors import FormNotFoundError
from .objects import ObjectStore, WriteSession, resolve

logger = logging.getLogger(__name__)


def locate_form(store: ObjectStore, source: Optional[str] = None
                ) -> Tuple[WriteSession, DictionaryObject]:
    """Return an open write session for the form plus the form dictionary.

    An indirect form is modified in place. An inline form is moved to a new
    object, and the catalog is rewritten to point at it.

    Raises:
        FormNotFoundError: the catalog has no /AcroForm.
    """
    catalog = store.catalog
    raw = catalog.raw_get("/AcroForm") if "/AcroForm" in catalog else None
    form = resolve(raw)
    if not isinstance(form, DictionaryObject):
        raise FormNotFoundError(source)

    if isinstance(raw, IndirectObject):
        logger.debug("AcroForm is object %d, modifying it", raw.idnum)
        return store.begin_modified(raw), form

    form_ref = store.allocate()
    logger.debug("AcroForm is inline, moving it to object %d", form_ref.idnum)

    catalog_session = store.begin_modified(catalog.indirect_reference)
    body = store.partial_copy(catalog, {"/AcroForm"})
    body[NameObject("/AcroForm")] = form_ref
    catalog_session.finish(body)

    return store.begin_new(form_ref), form
