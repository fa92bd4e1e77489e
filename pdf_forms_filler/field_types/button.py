"""Checkbox, radio button and push button fields (/FT /Btn)."""

import logging
from typing import Any, Optional

from pypdf.generic import DictionaryObject, NameObject

from ..models import OFF_STATE, ButtonField
from ..objects import is_widget, lookup, resolve
from . import register
from .passthrough import ignore_value, write_unchanged
from .widgets import on_state

logger = logging.getLogger(__name__)


def _checkbox_selection(value: Any) -> Optional[int]:
    """A checkbox is option 0 when truthy, off otherwise."""
    if isinstance(value, str):
        value = value.lstrip("/") not in ("", OFF_STATE)
    return 0 if value else None


def _radio_selection(node: DictionaryObject, value: Any, fallback: str) -> Optional[int]:
    """Zero-based option index for a radio value.

    Accepts an index, None/False for no selection, True for the first
    option, or the name of an option's on-state.
    """
    if value is None or isinstance(value, bool):
        return 0 if value else None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        state = value.lstrip("/")
        if state.isdigit():
            return int(state)
        if state in ("", OFF_STATE):
            return None
        kids = lookup(node, "/Kids")
        if is_widget(node) or kids is None:
            return 0
        for index, kid in enumerate(kids):
            if on_state(resolve(kid), fallback) == state:
                return index
        logger.warning("Radio group has no option named '%s'; leaving it off", state)
        return None
    return int(value)


def update_option_buttons(ctx, session, node: DictionaryObject,
                          selected: Optional[int]) -> str:
    """Set /V and the widgets' /AS for a checkbox or radio group.

    Returns the state name that was written.
    """
    store = ctx.store
    fallback = ctx.config.on_state_fallback
    kids = lookup(node, "/Kids")

    if is_widget(node) or kids is None:
        # one option, held in the field's own widget
        state = OFF_STATE if selected is None else on_state(node, fallback)
        body = store.partial_copy(node, {"/V", "/AS"})
        body[NameObject("/V")] = NameObject("/" + state)
        body[NameObject("/AS")] = NameObject("/" + state)
        session.finish(body)
        return state

    if selected is not None and not 0 <= selected < len(kids):
        logger.warning("Option index %d is out of range for %d widgets; leaving it off",
                       selected, len(kids))
        selected = None

    state = OFF_STATE if selected is None else on_state(resolve(kids[selected]), fallback)
    body = store.partial_copy(node, {"/V", "/Kids"})
    body[NameObject("/V")] = NameObject("/" + state)
    records = store.promote_collection(session, body, "/Kids", kids)

    # turn on the selected widget, turn off all the others
    for index, record in enumerate(records):
        kid_session, kid = store.open_reference(record)
        if not isinstance(kid, DictionaryObject):
            kid_session.finish(kid)
            continue
        kid_body = store.partial_copy(kid, {"/AS"})
        kid_state = state if index == selected else OFF_STATE
        kid_body[NameObject("/AS")] = NameObject("/" + kid_state)
        kid_session.finish(kid_body)

    return state


@register(ButtonField)
def apply_button(ctx, session, node, spec, name, value):
    if spec.is_push_button:
        # push buttons have no value to set
        ignore_value(ctx, name, "push button")
        write_unchanged(session, node)
        return

    if spec.is_radio:
        selected = _radio_selection(node, value, ctx.config.on_state_fallback)
    else:
        selected = _checkbox_selection(value)

    state = update_option_buttons(ctx, session, node, selected)
    logger.debug("Set '%s' to /%s", name, state)
    ctx.report.mark_filled(name)
