"""Reading field node attributes: names, inherited properties, field kind."""

from dataclasses import dataclass, replace
from typing import Any, Iterable, Iterator, Optional, Union

from pypdf.generic import ArrayObject, DictionaryObject

from .models import (
    ButtonField, ChoiceField, FieldType, InheritedProperties, SignatureField,
    TextField, UnknownField,
)
from .objects import decode_text, lookup, resolve

FieldSpec = Union[ButtonField, TextField, ChoiceField, SignatureField, UnknownField]


def local_name(node: DictionaryObject) -> Optional[str]:
    """Partial field name (/T), or None for nameless nodes such as widgets."""
    return decode_text(lookup(node, "/T"))


def qualified_name(prefix: str, node: DictionaryObject) -> str:
    name = local_name(node)
    return prefix if name is None else prefix + name


def inherit(node: DictionaryObject, inherited: InheritedProperties) -> InheritedProperties:
    """Properties in effect at ``node``: its own declarations over ``inherited``."""
    changes = {}

    field_type = lookup(node, "/FT")
    if field_type is not None:
        changes["field_type"] = str(field_type)

    flags = lookup(node, "/Ff")
    if flags is not None:
        changes["flags"] = int(flags)

    default_appearance = lookup(node, "/DA")
    if default_appearance is not None:
        changes["default_appearance"] = decode_text(default_appearance)

    options = lookup(node, "/Opt")
    if options is not None:
        changes["options"] = options

    return replace(inherited, **changes) if changes else inherited


def resolve_field(node: DictionaryObject, inherited: InheritedProperties) -> FieldSpec:
    """Resolve the field kind of a terminal node."""
    props = inherit(node, inherited)
    flags = props.flags or 0

    if props.field_type == FieldType.BUTTON.value:
        return ButtonField(flags=flags)
    if props.field_type == FieldType.TEXT.value:
        return TextField(flags=flags, default_appearance=props.default_appearance)
    if props.field_type == FieldType.CHOICE.value:
        return ChoiceField(flags=flags, default_appearance=props.default_appearance)
    if props.field_type == FieldType.SIGNATURE.value:
        return SignatureField()
    return UnknownField(field_type=props.field_type)


@dataclass
class FieldInfo:
    """A terminal field, as listed by the discovery tools."""
    name: str
    kind: str
    flags: int = 0
    value: Any = None


def describe_kind(spec: FieldSpec) -> str:
    if isinstance(spec, ButtonField):
        if spec.is_push_button:
            return "push button"
        return "radio" if spec.is_radio else "checkbox"
    if isinstance(spec, TextField) and spec.is_rich:
        return "rich text"
    return spec.kind


def _display_value(value) -> Any:
    value = resolve(value)
    if isinstance(value, ArrayObject):
        return [decode_text(item) for item in value]
    return decode_text(value)


def iter_fields(form: DictionaryObject) -> Iterator[FieldInfo]:
    """Terminal fields of an AcroForm dictionary, with qualified names."""
    inherited = InheritedProperties(default_appearance=decode_text(lookup(form, "/DA")))
    yield from _walk(lookup(form, "/Fields"), inherited, "")


def _walk(items: Optional[Iterable], inherited: InheritedProperties,
          prefix: str) -> Iterator[FieldInfo]:
    for item in items or ():
        node = resolve(item)
        if not isinstance(node, DictionaryObject):
            continue

        name = qualified_name(prefix, node)
        kids = [resolve(kid) for kid in lookup(node, "/Kids") or ()]
        if any(isinstance(kid, DictionaryObject) and local_name(kid) is not None
               for kid in kids):
            yield from _walk(kids, inherit(node, inherited), name + ".")
            continue
        if local_name(node) is None:
            continue

        spec = resolve_field(node, inherited)
        yield FieldInfo(
            name=name,
            kind=describe_kind(spec),
            flags=getattr(spec, "flags", 0),
            value=_display_value(lookup(node, "/V")),
        )
