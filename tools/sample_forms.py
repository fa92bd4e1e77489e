#!/usr/bin/env python3
"""Build small fillable AcroForm PDFs with pypdf.

Used by demo.py and the tests. Run directly to write the sample form:
    python tools/sample_forms.py sample-forms/FormTemplate.pdf
"""

import sys
from pathlib import Path
from typing import List, Optional, Sequence

from pypdf import PdfWriter
from pypdf.generic import (
    ArrayObject,
    DecodedStreamObject,
    DictionaryObject,
    FloatObject,
    IndirectObject,
    NameObject,
    NumberObject,
    TextStringObject,
)

PAGE_WIDTH = 612
PAGE_HEIGHT = 792

DEFAULT_DA = "/Helv 0 Tf 0 g"

# /Ff values (bit n is 1 << (n - 1))
RADIO = 1 << 15
PUSH_BUTTON = 1 << 16
COMBO = 1 << 17
MULTI_SELECT = 1 << 21
RICH_TEXT = 1 << 25


def _name(value: str) -> NameObject:
    return NameObject(value if value.startswith("/") else "/" + value)


def _rect(rect: Sequence[float]) -> ArrayObject:
    return ArrayObject([FloatObject(v) for v in rect])


class FormBuilder:
    """Lays out fields top to bottom on a single letter-size page."""

    def __init__(self, default_appearance: Optional[str] = DEFAULT_DA,
                 inline_form: bool = False, with_resources: bool = True):
        self.writer = PdfWriter()
        self.page = self.writer.add_blank_page(PAGE_WIDTH, PAGE_HEIGHT)
        self.default_appearance = default_appearance
        self.inline_form = inline_form
        self.with_resources = with_resources
        self._fields = ArrayObject()
        self._annots = ArrayObject()
        self._next_y = PAGE_HEIGHT - 72

    def _next_rect(self, width: float = 200, height: float = 20) -> List[float]:
        y = self._next_y
        self._next_y -= height + 10
        return [72, y - height, 72 + width, y]

    def _add(self, obj) -> IndirectObject:
        return self.writer._add_object(obj)

    def _widget(self, rect=None, **entries) -> DictionaryObject:
        widget = DictionaryObject({
            NameObject("/Type"): NameObject("/Annot"),
            NameObject("/Subtype"): NameObject("/Widget"),
            NameObject("/F"): NumberObject(4),
            NameObject("/Rect"): _rect(rect or self._next_rect()),
        })
        for key, value in entries.items():
            widget[NameObject("/" + key)] = value
        return widget

    def _field(self, name: Optional[str], parent: Optional[IndirectObject] = None,
               **entries) -> DictionaryObject:
        node = DictionaryObject()
        if name is not None:
            node[NameObject("/T")] = TextStringObject(name)
        if parent is not None:
            node[NameObject("/Parent")] = parent
        for key, value in entries.items():
            node[NameObject("/" + key)] = value
        return node

    def _place(self, node: DictionaryObject, parent: Optional[DictionaryObject] = None,
               annotate: bool = True) -> IndirectObject:
        """Register a field/widget and attach it to its parent or the form."""
        ref = self._add(node)
        if annotate and node.get("/Subtype") == "/Widget":
            self._annots.append(ref)
        if parent is None:
            self._fields.append(ref)
        else:
            parent[NameObject("/Kids")].append(ref)
        return ref

    def _state_appearances(self, on_state: str) -> DictionaryObject:
        normal = DictionaryObject()
        for state in (on_state, "Off"):
            stream = DecodedStreamObject()
            stream.set_data(b"")
            stream.update({
                NameObject("/Type"): NameObject("/XObject"),
                NameObject("/Subtype"): NameObject("/Form"),
                NameObject("/BBox"): _rect([0, 0, 12, 12]),
            })
            normal[_name(state)] = self._add(stream)
        return DictionaryObject({NameObject("/N"): normal})

    def group(self, name: str, parent: Optional[DictionaryObject] = None,
              **entries) -> DictionaryObject:
        """Non-terminal field grouping named kid fields (Section.City).

        ``entries`` are inheritable attributes declared on the group, such
        as FT, Ff or DA.
        """
        node = self._field(name, Kids=ArrayObject(), **entries)
        self._place(node, parent)
        if parent is not None:
            node[NameObject("/Parent")] = parent.indirect_reference
        return node

    def text(self, name: str, value: Optional[str] = None, da: Optional[str] = None,
             rich: bool = False, parent: Optional[DictionaryObject] = None,
             rect=None, typed: bool = True, inline: bool = False) -> DictionaryObject:
        """Text field with its own widget.

        ``typed=False`` leaves /FT to be inherited from ``parent``; ``inline``
        puts the field directly in the parent's /Kids array.
        """
        entries = {"FT": NameObject("/Tx")} if typed else {}
        if da is not None:
            entries["DA"] = TextStringObject(da)
        if rich:
            entries["Ff"] = NumberObject(RICH_TEXT)
        if value is not None:
            entries["V"] = TextStringObject(value)
        node = self._widget(rect, **entries)
        node[NameObject("/T")] = TextStringObject(name)
        if parent is not None:
            node[NameObject("/Parent")] = parent.indirect_reference
        if inline:
            parent[NameObject("/Kids")].append(node)
        else:
            self._place(node, parent)
        return node

    def untyped(self, name: str) -> DictionaryObject:
        """Named widget with no /FT anywhere in its ancestry."""
        node = self._widget()
        node[NameObject("/T")] = TextStringObject(name)
        self._place(node)
        return node

    def text_with_widgets(self, name: str, count: int = 2, inline_kids: bool = False,
                          kid_da: Optional[str] = None) -> DictionaryObject:
        """Text field shown by several kid widgets."""
        node = self._field(name, FT=NameObject("/Tx"), Kids=ArrayObject())
        ref = self._place(node)
        for index in range(count):
            widget = self._widget(Parent=ref)
            if kid_da is not None and index == 0:
                widget[NameObject("/DA")] = TextStringObject(kid_da)
            if inline_kids:
                node[NameObject("/Kids")].append(widget)
            else:
                self._place(widget, node)
        return node

    def checkbox(self, name: str, on_state: str = "Yes", appearances: bool = True,
                 checked: bool = False) -> DictionaryObject:
        state = NameObject("/" + on_state) if checked else NameObject("/Off")
        entries = {"FT": NameObject("/Btn"), "V": state, "AS": state}
        if appearances:
            entries["AP"] = self._state_appearances(on_state)
        node = self._widget(rect=self._next_rect(12, 12), **entries)
        node[NameObject("/T")] = TextStringObject(name)
        self._place(node)
        return node

    def radio_group(self, name: str, states: Sequence[str] = ("Choice1", "Choice2", "Choice3"),
                    parent: Optional[DictionaryObject] = None, typed: bool = True
                    ) -> DictionaryObject:
        """Radio group with one kid widget per state.

        ``typed=False`` leaves /FT and /Ff to be inherited from ``parent``.
        """
        entries = {"FT": NameObject("/Btn"), "Ff": NumberObject(RADIO)} if typed else {}
        node = self._field(name, V=NameObject("/Off"), Kids=ArrayObject(), **entries)
        ref = self._place(node, parent)
        if parent is not None:
            node[NameObject("/Parent")] = parent.indirect_reference
        for state in states:
            widget = self._widget(rect=self._next_rect(12, 12), Parent=ref,
                                  AS=NameObject("/Off"),
                                  AP=self._state_appearances(state))
            self._place(widget, node)
        return node

    def choice(self, name: str, options: Sequence[str], multi: bool = False,
               combo: bool = False) -> DictionaryObject:
        flags = (MULTI_SELECT if multi else 0) | (COMBO if combo else 0)
        entries = {
            "FT": NameObject("/Ch"),
            "Opt": ArrayObject([TextStringObject(o) for o in options]),
        }
        if flags:
            entries["Ff"] = NumberObject(flags)
        node = self._widget(**entries)
        node[NameObject("/T")] = TextStringObject(name)
        self._place(node)
        return node

    def push_button(self, name: str) -> DictionaryObject:
        node = self._widget(FT=NameObject("/Btn"), Ff=NumberObject(PUSH_BUTTON))
        node[NameObject("/T")] = TextStringObject(name)
        self._place(node)
        return node

    def signature(self, name: str) -> DictionaryObject:
        node = self._widget(FT=NameObject("/Sig"))
        node[NameObject("/T")] = TextStringObject(name)
        self._place(node)
        return node

    def _resources(self) -> DictionaryObject:
        font = DictionaryObject({
            NameObject("/Type"): NameObject("/Font"),
            NameObject("/Subtype"): NameObject("/Type1"),
            NameObject("/BaseFont"): NameObject("/Helvetica"),
            NameObject("/Encoding"): NameObject("/WinAnsiEncoding"),
        })
        return DictionaryObject({
            NameObject("/Font"): DictionaryObject({NameObject("/Helv"): self._add(font)}),
            NameObject("/ProcSet"): ArrayObject([NameObject("/PDF"), NameObject("/Text")]),
        })

    def save(self, path) -> Path:
        form = DictionaryObject({NameObject("/Fields"): self._fields})
        if self.default_appearance is not None:
            form[NameObject("/DA")] = TextStringObject(self.default_appearance)
        if self.with_resources:
            form[NameObject("/DR")] = self._resources()

        self.page[NameObject("/Annots")] = self._annots
        root = self.writer._root_object
        root[NameObject("/AcroForm")] = form if self.inline_form else self._add(form)

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            self.writer.write(f)
        return path


def build_plain_pdf(path) -> Path:
    """A one-page PDF with no form at all."""
    writer = PdfWriter()
    writer.add_blank_page(PAGE_WIDTH, PAGE_HEIGHT)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        writer.write(f)
    return path


def build_sample_form(path) -> Path:
    """The personal details form filled by demo.py."""
    builder = FormBuilder()
    for name in ("Given Name Text Box", "Family Name Text Box", "House nr Text Box",
                 "Address 1 Text Box", "Address 2 Text Box", "Postcode Text Box",
                 "Height Formatted Field"):
        builder.text(name)
    builder.choice("Country Combo Box",
                   ["Austria", "Belgium", "France", "Germany", "Spain", "United Kingdom"],
                   combo=True)
    builder.checkbox("Driving License Check Box")
    builder.choice("Favourite Colour List Box",
                   ["Black", "Brown", "Red", "Blue", "Green", "Yellow"])
    for i in range(1, 6):
        builder.checkbox(f"Language {i} Check Box")
    builder.choice("Gender List Box", ["Man", "Woman"])
    return builder.save(path)


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    path = build_sample_form(sys.argv[1])
    print(f"Wrote sample form to {path}")


if __name__ == "__main__":
    main()
