"""Widget handling shared by the field appliers."""

from typing import Optional

from pypdf.generic import DictionaryObject, NameObject, StreamObject

from ..appearance import write_text_appearance
from ..models import OFF_STATE
from ..objects import decode_text, is_widget, lookup


def appearance_in_field(node: DictionaryObject) -> bool:
    """True when the field carries its own widget rather than kid widgets."""
    return is_widget(node) or lookup(node, "/Kids") is None


def on_state(widget: DictionaryObject, fallback: str) -> str:
    """Name of the first non-Off normal appearance of a checkbox/radio widget."""
    normal = lookup(lookup(widget, "/AP"), "/N")
    if isinstance(normal, DictionaryObject) and not isinstance(normal, StreamObject):
        for key in normal:
            if key != "/" + OFF_STATE:
                return key[1:]
    return fallback


def write_with_appearance(ctx, session, node: DictionaryObject, body: DictionaryObject,
                          text: str, default_appearance: Optional[str]) -> None:
    """Finish a filled text/choice field and generate its appearance.

    ``body`` is the partial copy of ``node`` with /V written. It must already
    exclude /AP when the field is its own widget, and /Kids otherwise.
    """
    store = ctx.store

    if appearance_in_field(node):
        ref = store.allocate()
        body[NameObject("/AP")] = DictionaryObject({NameObject("/N"): ref})
        session.finish(body)
        ctx.ledger.add(write_text_appearance(
            store, ref, node, default_appearance, text, ctx.default_resources))
        ctx.report.appearances += 1
        return

    # Field first, then each (now indirect) kid widget with a new /AP
    records = store.promote_collection(session, body, "/Kids", lookup(node, "/Kids"))
    for record in records:
        kid_session, kid = store.open_reference(record)
        if not isinstance(kid, DictionaryObject):
            kid_session.finish(kid)
            continue

        ref = store.allocate()
        kid_body = store.partial_copy(kid, {"/AP"})
        kid_body[NameObject("/AP")] = DictionaryObject({NameObject("/N"): ref})
        kid_session.finish(kid_body)

        kid_da = decode_text(lookup(kid, "/DA")) or default_appearance
        ctx.ledger.add(write_text_appearance(
            store, ref, kid, kid_da, text, ctx.default_resources))
        ctx.report.appearances += 1
