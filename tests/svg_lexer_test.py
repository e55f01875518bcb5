# Copyright 2020 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


import pytest
from svgc.svg_lexer import (
    Attribute,
    TokenKind,
    iter_attributes,
    remove_attributes,
    tokenize,
)
from svg_test_helpers import *


def _kinds(text):
    return [(t.kind, t.text) for t in tokenize(text)]


@pytest.mark.parametrize(
    "text",
    [
        "",
        load_test_svg("inkscape.svg"),
        load_test_svg("illustrator.svg"),
        # unterminated constructs
        "<svg><!-- never closed",
        "<svg><path d='M0,0",
        "<svg><style>.a{}",
        "<![CDATA[ x",
        # stray angle brackets
        "a < b > c <",
        "<<<svg>",
        "<!DOCTYPE svg [ <!ENTITY a 'b>'> ]><svg/>",
    ],
)
def test_tokens_reproduce_input(text):
    tokens = list(tokenize(text))
    assert "".join(t.text for t in tokens) == text
    for prev, token in zip(tokens, tokens[1:]):
        assert prev.end == token.start
    assert all(t.text for t in tokens)


def test_token_kinds():
    assert _kinds(
        '<?xml version="1.0"?><!DOCTYPE svg><svg><!-- c --><g/>x</svg>'
    ) == [
        (TokenKind.PROCESSING_INSTRUCTION, '<?xml version="1.0"?>'),
        (TokenKind.DECLARATION, "<!DOCTYPE svg>"),
        (TokenKind.START_TAG, "<svg>"),
        (TokenKind.COMMENT, "<!-- c -->"),
        (TokenKind.EMPTY_TAG, "<g/>"),
        (TokenKind.TEXT, "x"),
        (TokenKind.END_TAG, "</svg>"),
    ]


@pytest.mark.parametrize(
    "text, expected_name",
    [
        ("<svg>", "svg"),
        ("<svg:path d=''/>", "svg:path"),
        ("</inkscape:g >", "inkscape:g"),
        ('<?xml version="1.0"?>', "xml"),
    ],
)
def test_token_name(text, expected_name):
    (token,) = tokenize(text)
    assert token.name == expected_name


def test_markup_inside_attribute_value_is_not_a_tag():
    text = '<g title="<!-- a > b -->" d=\'/>\'>'
    assert _kinds(text) == [(TokenKind.START_TAG, text)]


def test_comment_with_markup():
    text = "<!-- <g fill='red'/> -->"
    assert _kinds(text) == [(TokenKind.COMMENT, text)]


def test_unterminated_comment_runs_to_end():
    assert _kinds("<a/><!-- x <b/>") == [
        (TokenKind.EMPTY_TAG, "<a/>"),
        (TokenKind.COMMENT, "<!-- x <b/>"),
    ]


@pytest.mark.parametrize("name", ["style", "script", "svg:style"])
def test_raw_text(name):
    body = "<!-- not a comment --> a > b && fill='red' </g>"
    text = f"<{name}>{body}</{name}>"
    assert _kinds(text) == [
        (TokenKind.START_TAG, f"<{name}>"),
        (TokenKind.RAW_TEXT, body),
        (TokenKind.END_TAG, f"</{name}>"),
    ]


def test_self_closing_style_has_no_raw_text():
    assert _kinds("<style/><g/>") == [
        (TokenKind.EMPTY_TAG, "<style/>"),
        (TokenKind.EMPTY_TAG, "<g/>"),
    ]


def test_cdata():
    text = "<style><![CDATA[a<b]]></style><![CDATA[<g>]]>"
    assert _kinds(text)[-1] == (TokenKind.CDATA, "<![CDATA[<g>]]>")


def test_doctype_internal_subset():
    doctype = '<!DOCTYPE svg [ <!ENTITY ns "http://x"> <!ENTITY a \'>\'> ]>'
    assert _kinds(doctype + "<svg/>") == [
        (TokenKind.DECLARATION, doctype),
        (TokenKind.EMPTY_TAG, "<svg/>"),
    ]


@pytest.mark.parametrize(
    "text",
    [
        "1 < 2",
        "a <3 b",
        "< g",
    ],
)
def test_lone_angle_bracket_is_text(text):
    assert _kinds(text) == [(TokenKind.TEXT, text)]


def test_unterminated_tag_opens_nothing():
    tokens = list(tokenize("<svg><style"))
    assert tokens[-1].kind is TokenKind.EMPTY_TAG


def test_text_content_elements_preserve():
    text = "<svg> a <text> b <tspan> c </tspan> d </text> e </svg>"
    preserved = [
        (t.text, t.preserve) for t in tokenize(text) if t.kind is TokenKind.TEXT
    ]
    assert preserved == [
        (" a ", False),
        (" b ", True),
        (" c ", True),
        (" d ", True),
        (" e ", False),
    ]


def test_xml_space_alone_does_not_preserve():
    text = '<svg xml:space="preserve"> a <g> b </g></svg>'
    assert not any(t.preserve for t in tokenize(text) if t.kind is TokenKind.TEXT)


def test_bad_nesting_unwinds():
    text = "<text><tspan>a</text> b"
    tokens = [t for t in tokenize(text) if t.kind is TokenKind.TEXT]
    assert [(t.text, t.preserve) for t in tokens] == [("a", True), (" b", False)]


def test_iter_attributes():
    tag = "<path d=\"M0 0\" fill='red' hidden x = 1 xlink:href=\"#a\"/>"
    assert [(a.name, a.value, a.quote) for a in iter_attributes(tag)] == [
        ("d", "M0 0", '"'),
        ("fill", "red", "'"),
        ("hidden", None, None),
        ("x", "1", None),
        ("xlink:href", "#a", '"'),
    ]


def test_iter_attributes_offsets():
    tag = '<g id="a">'
    (attr,) = iter_attributes(tag)
    assert attr == Attribute("id", "a", '"', 3, 9)
    assert tag[attr.start : attr.end] == 'id="a"'


@pytest.mark.parametrize(
    "tag, expected",
    [
        # first of several
        ('<g drop="1" b="2" c="3">', '<g b="2" c="3">'),
        # middle
        ('<g a="1" drop="2" c="3">', '<g a="1" c="3">'),
        # last, before />
        ('<g a="1" drop="2"/>', '<g a="1"/>'),
        # only one
        ('<g drop="1">', "<g>"),
        # no whitespace after the value
        ('<g drop="1"b="2">', '<g b="2">'),
        # consecutive
        ('<g drop="1" drop="2" c="3">', '<g c="3">'),
    ],
)
def test_remove_attributes(tag, expected):
    assert remove_attributes(tag, lambda a: a.name == "drop") == expected


def test_remove_attributes_none_match():
    tag = '<g  a="1">'
    assert remove_attributes(tag, lambda a: False) is tag
