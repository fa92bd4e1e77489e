"""Tests for filling AcroForms end to end."""

import logging

import pytest
from pypdf import PdfReader, PdfWriter
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    NumberObject,
    TextStringObject,
)

from pdf_forms_filler import (
    DuplicateFieldNameError,
    DuplicateNamePolicy,
    FillReport,
    FillerConfig,
    FormNotFoundError,
    PdfFormFiller,
    RichText,
    TemplateNotFoundError,
    UnsupportedFieldError,
    UnsupportedValuePolicy,
    fill_form,
    list_fields,
)
from pdf_forms_filler.fields import inherit, resolve_field
from pdf_forms_filler.models import ChoiceField, InheritedProperties
from tools.sample_forms import RADIO, FormBuilder, build_plain_pdf, build_sample_form


def read_form(path):
    reader = PdfReader(str(path))
    return reader.trailer["/Root"]["/AcroForm"]


def find_fields(form, qualified):
    """All nodes whose qualified name is ``qualified``."""
    found = []

    def walk(items, prefix):
        for item in items:
            node = item.get_object()
            name = node.get("/T")
            full = prefix + name if name is not None else prefix
            if name is not None and full == qualified:
                found.append(node)
            if "/Kids" in node:
                walk(node["/Kids"], full + ".")

    walk(form["/Fields"], "")
    return found


def find_field(form, qualified):
    found = find_fields(form, qualified)
    assert found, f"no field named {qualified}"
    return found[0]


def appearance(widget):
    return widget["/AP"]["/N"].get_data()


@pytest.fixture
def sample(tmp_path):
    return build_sample_form(tmp_path / "FormTemplate.pdf")


def test_fill_sample_form(sample, tmp_path):
    """The personal details form fills text, combo, list and checkbox fields."""
    output = tmp_path / "output" / "FormFilled.pdf"
    report = fill_form(sample, output, {
        "Given Name Text Box": "Eric",
        "Family Name Text Box": "Jones",
        "Country Combo Box": "Spain",
        "Driving License Check Box": True,
        "Language 3 Check Box": False,
        "Gender List Box": "Man",
    })

    assert output.exists()
    assert report.unmatched == []
    assert len(report.filled) == 6

    form = read_form(output)
    assert find_field(form, "Given Name Text Box")["/V"] == "Eric"
    assert find_field(form, "Country Combo Box")["/V"] == "Spain"
    assert find_field(form, "Driving License Check Box")["/V"] == "/Yes"
    assert find_field(form, "Driving License Check Box")["/AS"] == "/Yes"
    assert find_field(form, "Language 3 Check Box")["/V"] == "/Off"
    assert b"(Eric) Tj" in appearance(find_field(form, "Given Name Text Box"))


def test_output_is_incremental_update(sample, tmp_path):
    output = tmp_path / "filled.pdf"
    fill_form(sample, output, {"Given Name Text Box": "Eric"})

    original = sample.read_bytes()
    filled = output.read_bytes()
    assert filled.startswith(original)
    assert len(filled) > len(original)


def test_unfilled_fields_keep_their_values(tmp_path):
    builder = FormBuilder()
    builder.text("Kept", value="keep me")
    builder.text("Changed", value="old")
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    fill_form(template, output, {"Changed": "new"})

    form = read_form(output)
    assert find_field(form, "Kept")["/V"] == "keep me"
    assert find_field(form, "Changed")["/V"] == "new"


def test_empty_values_copy_form(sample, tmp_path):
    output = tmp_path / "filled.pdf"
    report = fill_form(sample, output, {})

    assert report.filled == []
    assert len(read_form(output)["/Fields"]) == len(read_form(sample)["/Fields"])
    before = [(f.name, f.kind, f.flags) for f in list_fields(sample)]
    after = [(f.name, f.kind, f.flags) for f in list_fields(output)]
    assert after == before


def test_qualified_names(tmp_path):
    builder = FormBuilder()
    section = builder.group("Section")
    builder.text("City", parent=section)
    builder.text("City")
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    report = fill_form(template, output, {"Section.City": "Madrid"})

    assert report.filled == ["Section.City"]
    form = read_form(output)
    assert find_field(form, "Section.City")["/V"] == "Madrid"
    assert "/V" not in find_field(form, "City")


def test_text_appearance_stream(tmp_path):
    builder = FormBuilder()
    builder.text("Name", rect=[72, 600, 272, 620])
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    fill_form(template, output, {"Name": "A (b)"})

    stream = find_field(read_form(output), "Name")["/AP"]["/N"]
    assert stream["/Subtype"] == "/Form"
    assert [float(v) for v in stream["/BBox"]] == [0, 0, 200, 20]
    assert stream.get_data() == (
        b"/Tx BMC\r\nq\r\nBT\r\n/Helv 0 Tf 0 g\r\n(A \\(b\\)) Tj\r\nET\r\nQ\r\nEMC"
    )


def test_field_da_overrides_form_da(tmp_path):
    builder = FormBuilder()
    builder.text("Name", da="/Helv 12 Tf 0 0 1 rg")
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    fill_form(template, output, {"Name": "x"})

    assert b"/Helv 12 Tf 0 0 1 rg" in appearance(find_field(read_form(output), "Name"))


def test_appearance_gets_default_resources(tmp_path):
    builder = FormBuilder()
    builder.text("Name")
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    fill_form(template, output, {"Name": "x"})

    resources = find_field(read_form(output), "Name")["/AP"]["/N"]["/Resources"]
    assert "/Helv" in resources["/Font"]
    assert "/ProcSet" not in resources


def test_no_resources_without_dr(tmp_path):
    builder = FormBuilder(with_resources=False)
    builder.text("Name")
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    fill_form(template, output, {"Name": "x"})

    assert "/Resources" not in find_field(read_form(output), "Name")["/AP"]["/N"]


def test_rich_text(tmp_path):
    builder = FormBuilder()
    builder.text("Notes", rich=True)
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    fill_form(template, output, {"Notes": RichText(plain="Hi", rich="<p>Hi</p>")})

    node = find_field(read_form(output), "Notes")
    assert node["/V"] == "Hi"
    assert node["/RV"] == "<p>Hi</p>"
    assert b"(Hi) Tj" in appearance(node)


def test_rich_text_from_plain_string(tmp_path):
    builder = FormBuilder()
    builder.text("Notes", rich=True)
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    fill_form(template, output, {"Notes": "Hi"})

    node = find_field(read_form(output), "Notes")
    assert node["/V"] == "Hi"
    assert node["/RV"] == "Hi"


def test_checkbox_values(tmp_path):
    builder = FormBuilder()
    builder.checkbox("A")
    builder.checkbox("B", checked=True)
    builder.checkbox("C", on_state="On")
    builder.checkbox("D", appearances=False)
    builder.checkbox("E")
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    fill_form(template, output, {"A": True, "B": False, "C": 1, "D": True, "E": "Off"})

    form = read_form(output)
    assert find_field(form, "A")["/AS"] == "/Yes"
    assert find_field(form, "B")["/V"] == "/Off"
    assert find_field(form, "B")["/AS"] == "/Off"
    assert find_field(form, "C")["/V"] == "/On"
    assert find_field(form, "D")["/V"] == "/Yes"
    assert find_field(form, "E")["/V"] == "/Off"


def test_on_state_fallback_from_config(tmp_path):
    builder = FormBuilder()
    builder.checkbox("D", appearances=False)
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    fill_form(template, output, {"D": True}, FillerConfig(on_state_fallback="On"))

    assert find_field(read_form(output), "D")["/V"] == "/On"


@pytest.mark.parametrize("value, expected", [
    (1, ["/Off", "/Choice2", "/Off"]),
    ("Choice3", ["/Off", "/Off", "/Choice3"]),
    (True, ["/Choice1", "/Off", "/Off"]),
    (None, ["/Off", "/Off", "/Off"]),
    (5, ["/Off", "/Off", "/Off"]),
])
def test_radio_group(tmp_path, value, expected):
    builder = FormBuilder()
    builder.radio_group("Size")
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    fill_form(template, output, {"Size": value})

    node = find_field(read_form(output), "Size")
    states = [kid.get_object()["/AS"] for kid in node["/Kids"]]
    assert states == expected
    selected = [s for s in expected if s != "/Off"]
    assert node["/V"] == (selected[0] if selected else "/Off")


def test_radio_out_of_range_warns(tmp_path, caplog):
    builder = FormBuilder()
    builder.radio_group("Size")
    template = builder.save(tmp_path / "form.pdf")

    with caplog.at_level(logging.WARNING):
        fill_form(template, tmp_path / "filled.pdf", {"Size": 7})

    assert "out of range" in caplog.text


def test_multi_select_choice(tmp_path):
    builder = FormBuilder()
    builder.choice("Colours", ["Red", "Blue", "Green"], multi=True)
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    fill_form(template, output, {"Colours": ["Red", "Blue"]})

    node = find_field(read_form(output), "Colours")
    assert list(node["/V"]) == ["Red", "Blue"]
    assert b"(Red) Tj" in appearance(node)


def test_kid_widgets_each_get_appearance(tmp_path):
    builder = FormBuilder()
    builder.text_with_widgets("Mirror", count=2, kid_da="/Helv 9 Tf 0 g")
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    report = fill_form(template, output, {"Mirror": "same"})

    assert report.appearances == 2
    node = find_field(read_form(output), "Mirror")
    assert node["/V"] == "same"
    assert "/AP" not in node
    kids = [kid.get_object() for kid in node["/Kids"]]
    assert b"/Helv 9 Tf 0 g" in appearance(kids[0])
    assert b"/Helv 0 Tf 0 g" in appearance(kids[1])
    for kid in kids:
        assert b"(same) Tj" in appearance(kid)


def test_inline_kids_are_promoted(tmp_path):
    builder = FormBuilder()
    builder.text_with_widgets("Inline", count=2, inline_kids=True)
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    fill_form(template, output, {"Inline": "x"})

    node = find_field(read_form(output), "Inline")
    assert all(isinstance(kid, IndirectObject) for kid in node["/Kids"])
    for kid in node["/Kids"]:
        assert b"(x) Tj" in appearance(kid.get_object())


def test_unmatched_group_promotes_inline_kid_fields(tmp_path):
    builder = FormBuilder()
    section = builder.group("S")
    builder.text("X", value="kept", parent=section, inline=True)
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    report = fill_form(template, output, {})

    assert report.filled == []
    node = find_field(read_form(output), "S")
    kids = node.raw_get("/Kids")
    assert len(kids) == 1
    assert all(isinstance(kid, IndirectObject) for kid in kids)
    assert find_field(read_form(output), "S.X")["/V"] == "kept"


def test_type_and_da_inherited_from_parent(tmp_path):
    builder = FormBuilder()
    parent = builder.group("P", FT=NameObject("/Tx"), DA=TextStringObject("/Cour 7 Tf 0 g"))
    builder.text("A", parent=parent, typed=False)
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    report = fill_form(template, output, {"P.A": "hi"})

    assert report.filled == ["P.A"]
    node = find_field(read_form(output), "P.A")
    assert node["/V"] == "hi"
    assert b"/Cour 7 Tf 0 g" in appearance(node)
    assert b"(hi) Tj" in appearance(node)


def test_radio_flag_inherited_from_parent(tmp_path):
    builder = FormBuilder()
    parent = builder.group("G", FT=NameObject("/Btn"), Ff=NumberObject(RADIO))
    builder.radio_group("Size", parent=parent, typed=False)
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    fill_form(template, output, {"G.Size": 2})

    node = find_field(read_form(output), "G.Size")
    assert node["/V"] == "/Choice3"
    assert [kid.get_object()["/AS"] for kid in node["/Kids"]] == ["/Off", "/Off", "/Choice3"]


def test_field_without_type_is_written_unchanged(tmp_path):
    builder = FormBuilder()
    builder.untyped("NoType")
    builder.text("Name")
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    report = fill_form(template, output, {"NoType": "x", "Name": "y"})

    assert report.ignored == ["NoType"]
    assert report.filled == ["Name"]
    assert report.unmatched == []
    form = read_form(output)
    assert "/V" not in find_field(form, "NoType")
    assert "/AP" not in find_field(form, "NoType")
    assert find_field(form, "Name")["/V"] == "y"


def test_inline_acroform_is_promoted(tmp_path):
    builder = FormBuilder(inline_form=True)
    builder.text("Name")
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    fill_form(template, output, {"Name": "x"})

    root = PdfReader(str(output)).trailer["/Root"]
    assert isinstance(root.raw_get("/AcroForm"), IndirectObject)
    assert find_field(root["/AcroForm"], "Name")["/V"] == "x"


def test_signature_value_warns_by_default(tmp_path, caplog):
    builder = FormBuilder()
    builder.signature("Sign Here")
    template = builder.save(tmp_path / "form.pdf")
    output = tmp_path / "filled.pdf"

    with caplog.at_level(logging.WARNING):
        report = fill_form(template, output, {"Sign Here": "me"})

    assert report.ignored == ["Sign Here"]
    assert report.unmatched == []
    assert "Sign Here" in caplog.text
    assert "/V" not in find_field(read_form(output), "Sign Here")


def test_push_button_value_raises_with_error_policy(tmp_path):
    builder = FormBuilder()
    builder.push_button("Submit")
    template = builder.save(tmp_path / "form.pdf")
    config = FillerConfig(unsupported_values=UnsupportedValuePolicy.ERROR)

    with pytest.raises(UnsupportedFieldError):
        fill_form(template, tmp_path / "filled.pdf", {"Submit": True}, config)


def test_write_failure_keeps_fill_error(tmp_path, monkeypatch, caplog):
    builder = FormBuilder()
    builder.push_button("Submit")
    template = builder.save(tmp_path / "form.pdf")
    config = FillerConfig(unsupported_values=UnsupportedValuePolicy.ERROR)

    def fail_write(self, stream):
        raise OSError("disk full")

    monkeypatch.setattr(PdfWriter, "write", fail_write)

    with caplog.at_level(logging.ERROR):
        with pytest.raises(UnsupportedFieldError):
            fill_form(template, tmp_path / "filled.pdf", {"Submit": True}, config)

    assert "Could not write" in caplog.text


def test_write_failure_after_successful_fill_raises(tmp_path, monkeypatch):
    builder = FormBuilder()
    builder.text("Name")
    template = builder.save(tmp_path / "form.pdf")

    def fail_write(self, stream):
        raise OSError("disk full")

    monkeypatch.setattr(PdfWriter, "write", fail_write)

    with pytest.raises(OSError, match="disk full"):
        fill_form(template, tmp_path / "filled.pdf", {"Name": "x"})


def test_ignore_policy_is_silent(tmp_path, caplog):
    builder = FormBuilder()
    builder.push_button("Submit")
    template = builder.save(tmp_path / "form.pdf")
    config = FillerConfig(unsupported_values=UnsupportedValuePolicy.IGNORE)

    with caplog.at_level(logging.WARNING):
        report = fill_form(template, tmp_path / "filled.pdf", {"Submit": True}, config)

    assert report.ignored == ["Submit"]
    assert "Submit" not in caplog.text


def _duplicate_form(tmp_path):
    builder = FormBuilder()
    builder.text("Dup")
    builder.text("Dup")
    return builder.save(tmp_path / "form.pdf")


def test_duplicate_names_apply_all(tmp_path):
    template = _duplicate_form(tmp_path)
    output = tmp_path / "filled.pdf"

    report = fill_form(template, output, {"Dup": "x"})

    assert report.filled == ["Dup", "Dup"]
    assert [n.get("/V") for n in find_fields(read_form(output), "Dup")] == ["x", "x"]


def test_duplicate_names_first(tmp_path):
    template = _duplicate_form(tmp_path)
    output = tmp_path / "filled.pdf"
    config = FillerConfig(duplicate_names=DuplicateNamePolicy.FIRST)

    fill_form(template, output, {"Dup": "x"}, config)

    assert [n.get("/V") for n in find_fields(read_form(output), "Dup")] == ["x", None]


def test_duplicate_names_error(tmp_path):
    template = _duplicate_form(tmp_path)
    config = FillerConfig(duplicate_names=DuplicateNamePolicy.ERROR)

    with pytest.raises(DuplicateFieldNameError):
        fill_form(template, tmp_path / "filled.pdf", {"Dup": "x"}, config)


def test_unmatched_values_are_reported(sample, tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        report = fill_form(sample, tmp_path / "filled.pdf", {"No Such Field": "x"})

    assert report.unmatched == ["No Such Field"]
    assert "No Such Field" in caplog.text


def test_repeated_fill(sample, tmp_path):
    output = tmp_path / "filled.pdf"
    filler = PdfFormFiller(sample, output)

    filler.fill({"Given Name Text Box": "Eric"})
    filler.fill({"Given Name Text Box": "James"})

    assert find_field(read_form(output), "Given Name Text Box")["/V"] == "James"
    assert output.read_bytes().startswith(sample.read_bytes())


def test_missing_template(tmp_path):
    with pytest.raises(TemplateNotFoundError):
        PdfFormFiller(tmp_path / "missing.pdf", tmp_path / "out.pdf")
    with pytest.raises(FileNotFoundError):
        list_fields(tmp_path / "missing.pdf")


def test_pdf_without_form(tmp_path):
    template = build_plain_pdf(tmp_path / "plain.pdf")

    with pytest.raises(FormNotFoundError):
        fill_form(template, tmp_path / "out.pdf", {"x": 1})
    with pytest.raises(FormNotFoundError):
        list_fields(template)


def test_list_fields(tmp_path):
    builder = FormBuilder()
    section = builder.group("Section")
    builder.text("City", value="Paris", parent=section)
    builder.checkbox("Agree")
    builder.radio_group("Size")
    builder.text("Notes", rich=True)
    builder.push_button("Submit")
    builder.signature("Sign")
    builder.choice("Colours", ["Red"], multi=True)
    template = builder.save(tmp_path / "form.pdf")

    fields = {info.name: info for info in list_fields(template)}

    assert fields["Section.City"].value == "Paris"
    assert fields["Section.City"].kind == "text"
    assert fields["Agree"].kind == "checkbox"
    assert fields["Agree"].value == "/Off"
    assert fields["Size"].kind == "radio"
    assert fields["Notes"].kind == "rich text"
    assert fields["Submit"].kind == "push button"
    assert fields["Sign"].kind == "signature"
    assert fields["Colours"].kind == "choice"


def test_fill_report_tracks_seen_names():
    report = FillReport()
    report.mark_filled("A")
    report.mark_ignored("B")
    report.mark_filled("A")

    assert report.filled == ["A", "A"]
    assert report.ignored == ["B"]
    assert report.seen("A")
    assert report.seen("B")
    assert not report.seen("C")


def test_choice_variant_carries_flags_and_da_only():
    node = DictionaryObject({
        NameObject("/T"): TextStringObject("Colours"),
        NameObject("/FT"): NameObject("/Ch"),
        NameObject("/Opt"): ArrayObject([TextStringObject("Red")]),
    })

    spec = resolve_field(node, InheritedProperties(default_appearance="/Helv 0 Tf 0 g"))

    assert spec == ChoiceField(flags=0, default_appearance="/Helv 0 Tf 0 g")
    assert inherit(node, InheritedProperties()).options == ["Red"]
