"""Text fields (/FT /Tx), plain and rich."""

from collections.abc import Mapping
from typing import Any

from pypdf.generic import NameObject, TextStringObject

from ..models import RichText, TextField
from . import register
from .widgets import appearance_in_field, write_with_appearance


def as_rich_text(value: Any) -> RichText:
    """Normalize a text value to a plain/rich pair."""
    if isinstance(value, RichText):
        return value
    if isinstance(value, Mapping):
        rich = value.get("rich")
        return RichText(plain=str(value.get("plain", "")),
                        rich=None if rich is None else str(rich))
    return RichText(plain="" if value is None else str(value))


@register(TextField)
def apply_text(ctx, session, node, spec, name, value):
    value = as_rich_text(value)

    excluded = {"/V"}
    if spec.is_rich:
        excluded.add("/RV")
    excluded.add("/AP" if appearance_in_field(node) else "/Kids")

    body = ctx.store.partial_copy(node, excluded)
    body[NameObject("/V")] = TextStringObject(value.plain)
    if spec.is_rich:
        body[NameObject("/RV")] = TextStringObject(value.rich_value)

    write_with_appearance(ctx, session, node, body, value.plain, spec.default_appearance)
    ctx.report.mark_filled(name)
