"""Combo box and list box fields (/FT /Ch)."""

from pypdf.generic import ArrayObject, NameObject, TextStringObject

from ..models import ChoiceField
from . import register
from .widgets import appearance_in_field, write_with_appearance


@register(ChoiceField)
def apply_choice(ctx, session, node, spec, name, value):
    excluded = {"/V", "/AP" if appearance_in_field(node) else "/Kids"}
    body = ctx.store.partial_copy(node, excluded)

    if isinstance(value, (list, tuple)):
        # multiple selection; the appearance shows the first one
        selections = [str(item) for item in value]
        body[NameObject("/V")] = ArrayObject(TextStringObject(item) for item in selections)
        text = selections[0] if selections else ""
    else:
        text = "" if value is None else str(value)
        body[NameObject("/V")] = TextStringObject(text)

    write_with_appearance(ctx, session, node, body, text, spec.default_appearance)
    ctx.report.mark_filled(name)
