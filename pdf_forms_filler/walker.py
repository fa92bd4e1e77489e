"""Recursive rewrite of the AcroForm field tree.

Every node is visited depth first. A node whose qualified name is in the
value map is filled; any other node is re-emitted as-is, except that its
kids are promoted to indirect objects and visited in turn.
"""

import logging

from pypdf.generic import DictionaryObject

from .errors import DuplicateFieldNameError
from .field_types import apply_value
from .fields import inherit, qualified_name
from .models import DuplicateNamePolicy, InheritedProperties
from .objects import decode_text, lookup

logger = logging.getLogger(__name__)


def write_form(ctx, session, form: DictionaryObject) -> None:
    """Write the filled form dictionary and all its fields.

    ``session`` is the open write of the form object; it is finished here.
    """
    body = ctx.store.partial_copy(form, {"/Fields"})
    fields = lookup(form, "/Fields")
    if fields is None:
        logger.debug("AcroForm has no /Fields")
        session.finish(body)
        return

    # the form's /DA is the default for every field
    inherited = InheritedProperties(default_appearance=decode_text(lookup(form, "/DA")))
    write_fields(ctx, session, body, "/Fields", fields, inherited, "")


def write_fields(ctx, session, body, key, items, inherited, prefix) -> None:
    """Write ``body[key]`` as references, finish ``session``, then each child."""
    records = ctx.store.promote_collection(session, body, key, items)
    for record in records:
        child_session, child = ctx.store.open_reference(record)
        write_field(ctx, child_session, child, inherited, prefix)


def write_field(ctx, session, node, inherited, prefix: str) -> None:
    """Write one field, filling it if its name has a value."""
    if not isinstance(node, DictionaryObject):
        session.finish(node)
        return

    name = qualified_name(prefix, node)
    if _should_fill(ctx, name):
        apply_value(ctx, session, node, name, ctx.values[name], inherited)
    else:
        write_field_and_kids(ctx, session, node, inherited, name)


def write_field_and_kids(ctx, session, node, inherited, name: str) -> None:
    """Write a node without a value, then recurse into its kids."""
    body = ctx.store.partial_copy(node, {"/Kids"})
    kids = lookup(node, "/Kids")
    if kids is None:
        session.finish(body)
        return

    write_fields(ctx, session, body, "/Kids", kids, inherit(node, inherited), name + ".")


def _should_fill(ctx, name: str) -> bool:
    if name not in ctx.values:
        return False
    if ctx.report.seen(name):
        policy = ctx.config.duplicate_names
        if policy is DuplicateNamePolicy.ERROR:
            raise DuplicateFieldNameError(name)
        if policy is DuplicateNamePolicy.FIRST:
            logger.debug("'%s' was already filled; leaving this match unchanged", name)
            return False
    return True
