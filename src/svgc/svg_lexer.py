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

"""Splits svg source into tokens without building a tree.

The scanner is a small state machine over LexicalMode: it knows when it is
inside a tag, a quoted attribute value, a comment or the raw content of a
<style>/<script>, so later passes never mistake "<!--" in an attribute value
or "fill=" in css for markup.

Joining the text of every token yields the input unchanged.
"""

import dataclasses
import enum
import re
from typing import (
    AbstractSet,
    Callable,
    Generator,
    List,
    NamedTuple,
    Optional,
    Tuple,
)
from svgc import svg_meta


class LexicalMode(enum.Enum):
    PLAIN_MARKUP = enum.auto()
    INSIDE_TAG = enum.auto()
    INSIDE_ATTRIBUTE_VALUE = enum.auto()
    INSIDE_COMMENT = enum.auto()
    INSIDE_RAW_TEXT = enum.auto()


class TokenKind(enum.Enum):
    TEXT = enum.auto()
    RAW_TEXT = enum.auto()
    START_TAG = enum.auto()
    END_TAG = enum.auto()
    EMPTY_TAG = enum.auto()
    COMMENT = enum.auto()
    CDATA = enum.auto()
    PROCESSING_INSTRUCTION = enum.auto()
    DECLARATION = enum.auto()


_OPENING_TAG_KINDS = frozenset({TokenKind.START_TAG, TokenKind.EMPTY_TAG})


class Token(NamedTuple):
    kind: TokenKind
    text: str
    start: int
    # qualified name, tags and processing instructions only
    name: Optional[str] = None
    # character data inside a text content element, where whitespace renders
    preserve: bool = False

    @property
    def end(self) -> int:
        return self.start + len(self.text)

    def is_opening_tag(self) -> bool:
        return self.kind in _OPENING_TAG_KINDS


class Attribute(NamedTuple):
    name: str
    value: Optional[str]
    quote: Optional[str]  # None for a bare (unquoted) value or no value
    start: int
    end: int


# "<" only opens markup when followed by something markup-like; "a < b" is text
_MARKUP_START_RE = re.compile(r"<(?:[!?]|/?(?:[:_]|[^\W\d]))")
_TAG_NAME_RE = re.compile(r"<[/?]?([^\s/>?\"'=]*)")
_TAG_STOP_RE = re.compile(r"[\"'>]")
_ATTRIBUTE_RE = re.compile(
    r"([^\s=/>?\"']+)"  # name
    r"(?:\s*=\s*"
    r"(?:\"([^\"]*)\"|'([^']*)'|([^\s>\"']+))"  # double, single or bare value
    r")?"
)


def _raw_text_end_re(name: str):
    return re.compile(f"</{re.escape(name)}[{svg_meta.XML_WHITESPACE}]*>")


@dataclasses.dataclass
class ScanCursor:
    text: str
    pos: int = 0
    mode: LexicalMode = LexicalMode.PLAIN_MARKUP
    quote: Optional[str] = None  # while INSIDE_ATTRIBUTE_VALUE
    raw_tag: Optional[str] = None  # while INSIDE_RAW_TEXT
    # open whitespace significant elements, innermost last
    text_elements: List[str] = dataclasses.field(default_factory=list)

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    @property
    def preserve(self) -> bool:
        return bool(self.text_elements)

    def _take(self, end: int) -> Tuple[int, str]:
        start = self.pos
        self.pos = end
        return start, self.text[start:end]

    def _end_of(self, delimiter: str, search_from: int) -> int:
        idx = self.text.find(delimiter, search_from)
        return len(self.text) if idx == -1 else idx + len(delimiter)

    def at_markup(self) -> bool:
        return _MARKUP_START_RE.match(self.text, self.pos) is not None

    def scan_text(self) -> Token:
        # the current char is known not to open markup
        m = _MARKUP_START_RE.search(self.text, self.pos + 1)
        start, text = self._take(m.start() if m else len(self.text))
        return Token(TokenKind.TEXT, text, start, preserve=self.preserve)

    def scan_raw_text(self) -> Token:
        m = _raw_text_end_re(self.raw_tag).search(self.text, self.pos)
        start, text = self._take(m.start() if m else len(self.text))
        self.mode, self.raw_tag = LexicalMode.PLAIN_MARKUP, None
        return Token(TokenKind.RAW_TEXT, text, start, preserve=True)

    def scan_comment(self) -> Token:
        # an unterminated comment runs to the end of input
        self.mode = LexicalMode.INSIDE_COMMENT
        start, text = self._take(self._end_of("-->", self.pos + len("<!--")))
        self.mode = LexicalMode.PLAIN_MARKUP
        return Token(TokenKind.COMMENT, text, start)

    def scan_cdata(self) -> Token:
        start, text = self._take(self._end_of("]]>", self.pos + len("<![CDATA[")))
        return Token(TokenKind.CDATA, text, start, preserve=self.preserve)

    def scan_processing_instruction(self) -> Token:
        start, text = self._take(self._end_of("?>", self.pos + 2))
        return Token(
            TokenKind.PROCESSING_INSTRUCTION,
            text,
            start,
            _TAG_NAME_RE.match(text).group(1),
        )

    def scan_declaration(self) -> Token:
        # <!DOCTYPE may carry an internal subset: [ <!ENTITY x "y"> ]
        text = self.text
        depth = 0
        quote = None
        i = self.pos + 2
        end = len(text)
        while i < len(text):
            ch = text[i]
            if quote:
                if ch == quote:
                    quote = None
            elif ch in "\"'":
                quote = ch
            elif ch == "[":
                depth += 1
            elif ch == "]":
                depth = max(depth - 1, 0)
            elif ch == ">" and depth == 0:
                end = i + 1
                break
            i += 1
        start, text = self._take(end)
        return Token(TokenKind.DECLARATION, text, start)

    def scan_tag(self) -> Token:
        text = self.text
        self.mode = LexicalMode.INSIDE_TAG
        i = self.pos + 1
        closed = False
        while True:
            if self.mode is LexicalMode.INSIDE_ATTRIBUTE_VALUE:
                close = text.find(self.quote, i)
                if close == -1:
                    i = len(text)
                    break
                self.mode, self.quote = LexicalMode.INSIDE_TAG, None
                i = close + 1
                continue
            m = _TAG_STOP_RE.search(text, i)
            if m is None:
                i = len(text)
                break
            i = m.end()
            if m.group() == ">":
                closed = True
                break
            self.mode, self.quote = LexicalMode.INSIDE_ATTRIBUTE_VALUE, m.group()
        self.mode, self.quote = LexicalMode.PLAIN_MARKUP, None

        start, tag = self._take(i)
        name = _TAG_NAME_RE.match(tag).group(1)
        if tag.startswith("</"):
            kind = TokenKind.END_TAG
        elif closed and not tag.endswith("/>"):
            kind = TokenKind.START_TAG
        else:
            # self-closing, or cut off by end of input; either way opens nothing
            kind = TokenKind.EMPTY_TAG
        return Token(kind, tag, start, name)

    def enter(
        self,
        token: Token,
        raw_text_elements: AbstractSet[str],
        whitespace_elements: AbstractSet[str],
    ):
        local_name = svg_meta.strip_prefix(token.name)
        if local_name in raw_text_elements:
            self.mode, self.raw_tag = LexicalMode.INSIDE_RAW_TEXT, token.name
        if local_name in whitespace_elements:
            self.text_elements.append(token.name)

    def leave(self, token: Token):
        # tolerate bad nesting: unwind to the nearest element of the same name
        for i in range(len(self.text_elements) - 1, -1, -1):
            if self.text_elements[i] == token.name:
                del self.text_elements[i:]
                return


def tokenize(
    text: str,
    raw_text_elements: AbstractSet[str] = svg_meta.RAW_TEXT_ELEMENTS,
    whitespace_elements: AbstractSet[str] = svg_meta.WHITESPACE_SIGNIFICANT_ELEMENTS,
) -> Generator[Token, None, None]:
    """Yields the tokens of text, left to right.

    Never fails: input that isn't well formed still tokenizes, with
    unterminated constructs running to the end of input.
    """
    cursor = ScanCursor(text)
    while not cursor.at_end():
        pos = cursor.pos
        if cursor.mode is LexicalMode.INSIDE_RAW_TEXT:
            token = cursor.scan_raw_text()
        elif text.startswith("<!--", pos):
            token = cursor.scan_comment()
        elif text.startswith("<![CDATA[", pos):
            token = cursor.scan_cdata()
        elif text.startswith("<!", pos):
            token = cursor.scan_declaration()
        elif text.startswith("<?", pos):
            token = cursor.scan_processing_instruction()
        elif cursor.at_markup():
            token = cursor.scan_tag()
            if token.kind is TokenKind.START_TAG:
                cursor.enter(token, raw_text_elements, whitespace_elements)
            elif token.kind is TokenKind.END_TAG:
                cursor.leave(token)
        else:
            token = cursor.scan_text()
        if token.text:
            yield token


def iter_attributes(tag: str) -> Generator[Attribute, None, None]:
    """Yields the attributes of a tag or processing instruction.

    Offsets are relative to tag.
    """
    m = _TAG_NAME_RE.match(tag)
    pos = m.end() if m else 0
    while pos < len(tag):
        ch = tag[pos]
        if ch.isspace() or ch in "/>?\"'=":
            pos += 1
            continue
        m = _ATTRIBUTE_RE.match(tag, pos)
        name, double_quoted, single_quoted, bare = m.groups()
        if double_quoted is not None:
            value, quote = double_quoted, '"'
        elif single_quoted is not None:
            value, quote = single_quoted, "'"
        else:
            value, quote = bare, None
        yield Attribute(name, value, quote, m.start(), m.end())
        pos = m.end()


def _ends_attribute(tag: str, pos: int) -> bool:
    return pos >= len(tag) or tag[pos] in svg_meta.XML_WHITESPACE or tag[pos] in "/>?"


def remove_attributes(tag: str, predicate: Callable[[Attribute], bool]) -> str:
    """Deletes matching attributes, each with one adjoining whitespace char.

    The preceding whitespace goes if that leaves the next attribute separated;
    otherwise the following whitespace, if any.
    """
    pieces = []
    pos = 0
    for attr in iter_attributes(tag):
        if not predicate(attr):
            continue
        start, end = attr.start, attr.end
        if (
            start > pos
            and tag[start - 1] in svg_meta.XML_WHITESPACE
            and _ends_attribute(tag, end)
        ):
            start -= 1
        elif end < len(tag) and tag[end] in svg_meta.XML_WHITESPACE:
            end += 1
        pieces.append(tag[pos:start])
        pos = end
    if not pieces:
        return tag
    pieces.append(tag[pos:])
    return "".join(pieces)
