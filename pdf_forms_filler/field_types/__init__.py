"""Value appliers for each kind of AcroForm field.

Each module registers an applier for one field variant:
    (ctx, session, node, spec, name, value) -> None
An applier writes the filled node into ``session`` and finishes it, along
with any widget objects it rewrites.
"""

import logging
from typing import Any, Callable, Dict

from pypdf.generic import DictionaryObject

from ..fields import FieldSpec, resolve_field
from ..models import InheritedProperties
from ..objects import WriteSession

logger = logging.getLogger(__name__)

ApplierFn = Callable[..., None]

# Registry: field variant class -> applier
_REGISTRY: Dict[type, ApplierFn] = {}


def register(kind: type):
    """Decorator to register the applier for a field variant."""
    def decorator(fn: ApplierFn) -> ApplierFn:
        _REGISTRY[kind] = fn
        return fn
    return decorator


def get_applier(spec: FieldSpec) -> ApplierFn:
    """Get the applier registered for a resolved field variant."""
    if type(spec) not in _REGISTRY:
        raise ValueError(f"No applier for {type(spec).__name__}. Available: "
                         f"{[k.__name__ for k in _REGISTRY]}")
    return _REGISTRY[type(spec)]


def apply_value(ctx, session: WriteSession, node: DictionaryObject, name: str,
                value: Any, inherited: InheritedProperties) -> None:
    """Fill the terminal field ``node`` with ``value``."""
    spec = resolve_field(node, inherited)
    logger.debug("Filling '%s' as %s field", name, spec.kind)
    get_applier(spec)(ctx, session, node, spec, name, value)


# Import all applier modules to trigger registration
from . import button  # noqa: E402, F401
from . import choice  # noqa: E402, F401
from . import passthrough  # noqa: E402, F401
from . import text  # noqa: E402, F401
