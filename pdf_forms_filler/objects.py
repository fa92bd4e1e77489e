"""Object rewrite plumbing on top of a pypdf incremental writer.

Every structure the filler touches is re-emitted as a numbered indirect
object. ``ObjectStore`` is the only place that hands out object numbers and
it enforces that a single indirect object is being written at a time:

    session = store.begin_modified(ref)
    body = store.partial_copy(source, {"/V"})
    body[NameObject("/V")] = TextStringObject("new")
    session.finish(body)
"""

import codecs
import logging
from typing import Collection, Iterable, List, Optional, Tuple

from pypdf import PdfWriter
from pypdf.generic import (
    ArrayObject,
    ByteStringObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    NullObject,
    PdfObject,
    StreamObject,
    TextStringObject,
)

from .errors import WriteSessionError
from .models import FieldReference

logger = logging.getLogger(__name__)


def resolve(value):
    """Dereference an indirect object; direct values are returned as-is."""
    if value is None:
        return None
    value = value.get_object()
    if isinstance(value, NullObject):
        return None
    return value


def lookup(dictionary, key: str):
    """Resolved value of ``dictionary[key]``, or None if it is absent."""
    if not isinstance(dictionary, DictionaryObject) or key not in dictionary:
        return None
    return resolve(dictionary.raw_get(key))


def decode_text(value) -> Optional[str]:
    """Decode a literal or hex string object to text."""
    value = resolve(value)
    if value is None:
        return None
    if isinstance(value, TextStringObject):
        return str(value)
    if isinstance(value, ByteStringObject):
        raw = bytes(value)
        if raw[:2] in (codecs.BOM_UTF16_BE, codecs.BOM_UTF16_LE):
            return raw.decode("utf-16")
        return raw.decode("latin-1")
    return str(value)


def is_widget(node) -> bool:
    return lookup(node, "/Subtype") == "/Widget"


def copy_direct(value):
    """Deep copy a parsed value without reinterpreting it.

    Containers are rebuilt; indirect references and scalars are kept.
    """
    if isinstance(value, IndirectObject) or isinstance(value, StreamObject):
        return value
    if isinstance(value, DictionaryObject):
        return DictionaryObject(
            {key: copy_direct(value.raw_get(key)) for key in value}
        )
    if isinstance(value, ArrayObject):
        return ArrayObject(copy_direct(item) for item in value)
    return value


class WriteSession:
    """An open write of one indirect object.

    Must be finished before any other object write can begin.
    """

    def __init__(self, store: "ObjectStore", ref: IndirectObject, existing: bool):
        self.store = store
        self.ref = ref
        self.existing = existing
        self.finished = False

    def finish(self, body: PdfObject) -> IndirectObject:
        self.store._commit(self, body)
        return self.ref

    def __repr__(self) -> str:
        mode = "modify" if self.existing else "new"
        return f"<WriteSession {mode} {self.ref.idnum}>"


class ObjectStore:
    """Allocation and exclusive write sessions over an incremental PdfWriter."""

    def __init__(self, writer: PdfWriter):
        self._writer = writer
        self._open: Optional[WriteSession] = None
        self.allocated = 0

    @property
    def writer(self) -> PdfWriter:
        return self._writer

    @property
    def catalog(self) -> DictionaryObject:
        return self._writer.root_object

    @property
    def open_session(self) -> Optional[WriteSession]:
        return self._open

    def allocate(self) -> IndirectObject:
        """Reserve the next free object number."""
        ref = self._writer._add_object(NullObject())
        self.allocated += 1
        return ref

    def fetch(self, ref: IndirectObject) -> PdfObject:
        """Current content of an existing object, read right before rewriting it."""
        return self._writer.get_object(ref.idnum)

    def begin_new(self, ref: IndirectObject) -> WriteSession:
        return self._begin(ref, existing=False)

    def begin_modified(self, ref: IndirectObject) -> WriteSession:
        return self._begin(ref, existing=True)

    def open_reference(self, record: FieldReference) -> Tuple[WriteSession, PdfObject]:
        """Open the write session for a collection child and return its source."""
        if record.existing:
            session = self.begin_modified(record.ref)
            return session, self.fetch(record.ref)
        session = self.begin_new(record.ref)
        return session, record.value

    def _begin(self, ref: IndirectObject, existing: bool) -> WriteSession:
        if self._open is not None:
            raise WriteSessionError(
                f"Cannot start object {ref.idnum} while {self._open!r} is open"
            )
        self._open = WriteSession(self, ref, existing)
        return self._open

    def _commit(self, session: WriteSession, body: PdfObject) -> None:
        if session is not self._open or session.finished:
            raise WriteSessionError(f"{session!r} is not the open write session")

        current = self.fetch(session.ref) if session.existing else None
        if body is current:
            pass
        elif (
            isinstance(current, DictionaryObject)
            and not isinstance(current, StreamObject)
            and type(body) is DictionaryObject
        ):
            # Keep the identity of objects pypdf itself holds (the catalog).
            current.clear()
            current.update(body)
        else:
            self._writer._replace_object(session.ref.idnum, body)

        session.finished = True
        self._open = None

    def partial_copy(self, source: DictionaryObject,
                     excluded: Collection[str] = ()) -> DictionaryObject:
        """New dictionary holding every key of ``source`` except ``excluded``.

        The caller writes the replacement values and finishes the session.
        """
        body = DictionaryObject()
        for key in source:
            if key not in excluded:
                body[NameObject(key)] = copy_direct(source.raw_get(key))
        return body

    def promote_collection(self, session: WriteSession, body: DictionaryObject,
                           key: str, items: Iterable) -> List[FieldReference]:
        """Write ``body[key]`` as references only, then finish ``session``.

        Inline children get a new object number; the returned records tell the
        caller how to reopen each child.
        """
        refs = ArrayObject()
        records = []
        for item in items if items is not None else ():
            if isinstance(item, IndirectObject):
                refs.append(item)
                records.append(FieldReference(ref=item, existing=True))
            else:
                ref = self.allocate()
                refs.append(ref)
                records.append(FieldReference(ref=ref, existing=False, value=item))
                logger.debug("Promoted inline entry of %s to object %d", key, ref.idnum)

        body[NameObject(key)] = refs
        session.finish(body)
        return records
