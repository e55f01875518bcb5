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

"""Drops comments and whitespace that has no effect on rendering."""

import re
from typing import List
from svgc import svg_meta
from svgc.svg_lexer import Token, TokenKind, tokenize


_WHITESPACE_RUN_RE = re.compile(f"[{svg_meta.XML_WHITESPACE}]+")

# whitespace between these and a neighbour inside a tag is never needed
_NO_SPACE_AFTER = frozenset("<=")
_NO_SPACE_BEFORE = frozenset("=/>?")

_TAG_KINDS = frozenset(
    {
        TokenKind.START_TAG,
        TokenKind.END_TAG,
        TokenKind.EMPTY_TAG,
        TokenKind.PROCESSING_INSTRUCTION,
    }
)


def _collapse_tag_whitespace(tag: str) -> str:
    """<rect\\n   x="1"  y='2 3' /> => <rect x="1" y='2 3'/>"""
    out = []
    quote = None
    i = 0
    n = len(tag)
    while i < n:
        ch = tag[i]
        if quote:
            out.append(ch)
            if ch == quote:
                quote = None
            i += 1
        elif ch in "\"'":
            quote = ch
            out.append(ch)
            i += 1
        elif ch in svg_meta.XML_WHITESPACE:
            j = i
            while j < n and tag[j] in svg_meta.XML_WHITESPACE:
                j += 1
            prev = out[-1] if out else None
            nxt = tag[j] if j < n else None
            if (
                prev is not None
                and nxt is not None
                and prev not in _NO_SPACE_AFTER
                and nxt not in _NO_SPACE_BEFORE
            ):
                out.append(" ")
            i = j
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _collapse_text(text: str) -> str:
    return _WHITESPACE_RUN_RE.sub(" ", text).strip(svg_meta.XML_WHITESPACE)


def _flush(out: List[str], pending: List[Token]):
    if not pending:
        return
    text = "".join(t.text for t in pending)
    if not pending[0].preserve:
        text = _collapse_text(text)
    out.append(text)
    pending.clear()


def normalize(svg: str) -> str:
    """Removes comments and insignificant whitespace.

    Attribute values, <style>/<script> content and character data of text
    content elements (text, tspan, textPath, foreignObject) are kept verbatim.
    Other character data is trimmed and its whitespace runs collapsed to a
    single space. Character data separated only by comments is joined first.
    """
    out = []
    pending = []  # character data awaiting collapse
    for token in tokenize(svg):
        if token.kind is TokenKind.COMMENT:
            continue
        if token.kind is TokenKind.TEXT:
            pending.append(token)
            continue
        _flush(out, pending)
        if token.kind in _TAG_KINDS:
            out.append(_collapse_tag_whitespace(token.text))
        else:
            out.append(token.text)
    _flush(out, pending)
    return "".join(out).strip(svg_meta.XML_WHITESPACE)
