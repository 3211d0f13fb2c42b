import pytest

from stratum.escaping import escape
from stratum.values import Attr, Html, Js, Slot, Text


def test_text_is_escaped_when_rendered():
    text = Text("<b>O'Brien</b>")

    assert str(text) == "&lt;b&gt;O&#39;Brien&lt;/b&gt;"
    assert text.raw() == "<b>O'Brien</b>"
    assert f"{text}" == str(text)


def test_wrappers_are_not_escaped_twice():
    assert escape(Text("a & b")) == "a &amp; b"
    assert escape(Attr('"quoted"')) == "&quot;quoted&quot;"


def test_html_passes_through():
    assert str(Html("<em>trusted</em>")) == "<em>trusted</em>"
    assert Html.trusted("<br>") == Html("<br>")


def test_attr_uses_named_quote_entities():
    assert str(Attr("a\"b'c & d")) == "a&quot;b&apos;c &amp; d"


def test_js_encodes_for_script_blocks():
    value = Js({"html": "</script><b>&'"})

    assert str(value) == '{"html": "\\u003C/script\\u003E\\u003Cb\\u003E\\u0026\\u0027"}'


def test_js_hex_escapes_quotes_inside_strings():
    assert str(Js('say "hi"')) == '"say \\u0022hi\\u0022"'
    assert str(Js(["a", 1, None, True])) == '["a", 1, null, true]'


def test_js_rejects_values_json_cannot_encode():
    with pytest.raises(TypeError):
        Js(object())


def test_js_values_are_hashable():
    assert hash(Js({"b": 1, "a": 2})) == hash(Js({"a": 2, "b": 1}))


def test_slot_is_produced_lazily():
    calls = []

    def produce():
        calls.append(1)
        return "<p>slot</p>"

    slot = Slot(produce)
    assert calls == []

    assert str(slot) == "<p>slot</p>"
    assert slot() == "<p>slot</p>"
    assert len(calls) == 2


def test_wrappers_are_immutable():
    text = Text("x")

    with pytest.raises(AttributeError, match="immutable"):
        text.value = "y"


def test_wrapper_equality_depends_on_type():
    assert Text("x") == Text("x")
    assert Text("x") != Html("x")
    assert {Text("x"), Text("x")} == {Text("x")}
    assert repr(Html("<b>")) == "Html('<b>')"
