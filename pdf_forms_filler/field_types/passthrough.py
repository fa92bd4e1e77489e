"""Fields that cannot take a value are written back unchanged."""

import logging

from ..errors import UnsupportedFieldError
from ..models import SignatureField, UnknownField, UnsupportedValuePolicy
from . import register

logger = logging.getLogger(__name__)


def write_unchanged(session, node) -> None:
    """Default terminal write: the node as-is, no recursion into kids."""
    session.finish(node)


def ignore_value(ctx, name: str, kind: str) -> None:
    """Record a value that will not be written, according to the policy."""
    policy = ctx.config.unsupported_values
    if policy is UnsupportedValuePolicy.ERROR:
        raise UnsupportedFieldError(name, kind)
    if policy is UnsupportedValuePolicy.WARN:
        logger.warning("Ignoring value for %s field '%s'", kind, name)
    ctx.report.mark_ignored(name)


@register(SignatureField)
def apply_signature(ctx, session, node, spec, name, value):
    # Signing is not supported
    ignore_value(ctx, name, spec.kind)
    write_unchanged(session, node)


@register(UnknownField)
def apply_unknown(ctx, session, node, spec, name, value):
    logger.debug("Field '%s' has no usable type (%s); writing it unchanged",
                 name, spec.field_type)
    ctx.report.mark_ignored(name)
    write_unchanged(session, node)
