"""Appearance streams for filled text and choice fields.

The generated Form XObject is minimal: it applies the field's
default appearance (/DA) operators verbatim and shows the value with a raw
code encoding, one byte per character. There is no font substitution,
multi-line layout or quadding; the /DA font must already cover the text.

Shared resources from the form's /DR are not copied into each stream when it
is generated. Instead the generator returns a ``ResourceRequest`` and the
``ResourceLedger`` contributes the entries to every pending stream's
/Resources in one finalization step.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from pypdf.generic import (
    ArrayObject,
    DecodedStreamObject,
    DictionaryObject,
    FloatObject,
    IndirectObject,
    NameObject,
    NumberObject,
)

from .objects import ObjectStore, copy_direct, lookup

logger = logging.getLogger(__name__)

EXCLUDED_RESOURCES = {"/ProcSet"}


@dataclass(frozen=True)
class ResourceRequest:
    """An appearance stream that needs the form's default resources."""
    stream_ref: IndirectObject
    default_resources: DictionaryObject


def encode_text(text: str) -> bytes:
    """Code-encode ``text``: each character becomes its single-byte code."""
    return text.encode("latin-1", errors="replace")


def literal_string(data: bytes) -> bytes:
    """Serialize bytes as a PDF literal string."""
    out = bytearray(b"(")
    for byte in data:
        if byte in b"()\\":
            out += b"\\" + bytes([byte])
        elif byte < 0x20 or byte > 0x7E:
            out += b"\\%03o" % byte
        else:
            out.append(byte)
    out += b")"
    return bytes(out)


def build_content(default_appearance: Optional[str], text: str) -> bytes:
    """Drawing program for a single line of field text."""
    da = (default_appearance or "").encode("latin-1", errors="replace")
    return b"\r\n".join([
        b"/Tx BMC",
        b"q",
        b"BT",
        da,
        literal_string(encode_text(text)) + b" Tj",
        b"ET",
        b"Q",
        b"EMC",
    ])


def widget_size(node: DictionaryObject) -> Tuple[float, float]:
    """Width and height of a widget's /Rect; (0, 0) when it has none."""
    rect = lookup(node, "/Rect")
    if rect is None or len(rect) != 4:
        logger.debug("Widget has no usable /Rect, using an empty box")
        return 0.0, 0.0
    x1, y1, x2, y2 = (float(v.get_object()) for v in rect)
    return abs(x2 - x1), abs(y2 - y1)


def write_text_appearance(
    store: ObjectStore,
    ref: IndirectObject,
    widget: DictionaryObject,
    default_appearance: Optional[str],
    text: str,
    default_resources: Optional[DictionaryObject] = None,
) -> Optional[ResourceRequest]:
    """Write the appearance Form XObject for ``widget`` under ``ref``.

    Returns the resource request to hand to the ledger, if the form declares
    default resources.
    """
    width, height = widget_size(widget)

    stream = DecodedStreamObject()
    stream.set_data(build_content(default_appearance, text))
    stream.update({
        NameObject("/Type"): NameObject("/XObject"),
        NameObject("/Subtype"): NameObject("/Form"),
        NameObject("/BBox"): ArrayObject([
            NumberObject(0), NumberObject(0), FloatObject(width), FloatObject(height),
        ]),
    })

    session = store.begin_new(ref)
    session.finish(stream)

    if default_resources is None:
        return None
    return ResourceRequest(stream_ref=ref, default_resources=default_resources)


class ResourceLedger:
    """Collects resource requests and resolves them when output is finalized."""

    def __init__(self):
        self._pending: List[ResourceRequest] = []

    def __len__(self) -> int:
        return len(self._pending)

    def add(self, request: Optional[ResourceRequest]) -> None:
        if request is not None:
            self._pending.append(request)

    def finalize(self, store: ObjectStore) -> int:
        """Set /Resources on every pending stream. Returns how many were done."""
        shared: Dict[int, Dict[str, object]] = {}
        for request in self._pending:
            key = id(request.default_resources)
            if key not in shared:
                shared[key] = self._shared_entries(store, request.default_resources)

        for request in self._pending:
            session = store.begin_modified(request.stream_ref)
            stream = store.fetch(request.stream_ref)
            stream[NameObject("/Resources")] = DictionaryObject(
                shared[id(request.default_resources)]
            )
            session.finish(stream)

        done = len(self._pending)
        self._pending = []
        return done

    @staticmethod
    def _shared_entries(store: ObjectStore, default_resources: DictionaryObject):
        """/DR entries as references, promoting direct containers once."""
        entries = {}
        for key in default_resources:
            if key in EXCLUDED_RESOURCES:
                continue
            value = default_resources.raw_get(key)
            if isinstance(value, (DictionaryObject, ArrayObject)):
                ref = store.allocate()
                store.begin_new(ref).finish(copy_direct(value))
                value = ref
            entries[NameObject(key)] = value
        return entries
