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

"""Removes editor metadata and other content svg renderers ignore.

Which elements and namespaces count as removable is policy, held in a
MetadataPolicy; the rules run in a fixed order and work on tokens, so nothing
inside attribute values or <style>/<script> content is ever matched.
"""

import dataclasses
import re
from typing import AbstractSet, Callable, FrozenSet, List, Optional, Set
from svgc import svg_meta
from svgc.svg_lexer import (
    Attribute,
    Token,
    TokenKind,
    iter_attributes,
    remove_attributes,
    tokenize,
)


@dataclasses.dataclass(frozen=True)
class MetadataPolicy:
    # elements/attributes in these namespaces are dropped, with the xmlns decls
    editor_namespaces: FrozenSet[str] = svg_meta.EDITOR_NAMESPACES
    # matched by local name, dropped with everything inside
    removable_elements: FrozenSet[str] = frozenset({"metadata"})
    # matched by local name, dropped when they have no content
    removable_when_empty: FrozenSet[str] = frozenset({"defs"})
    strip_xml_declaration: bool = True
    strip_svg_doctype: bool = True
    strip_unused_namespaces: bool = True
    strip_xml_space: bool = True


DEFAULT_POLICY = MetadataPolicy()


# <?xml ...?> says nothing a parser wouldn't assume when limited to these
_DEFAULT_XML_DECLARATION = {
    "version": frozenset({"1.0"}),
    "encoding": frozenset({"utf-8", "utf8"}),
    "standalone": frozenset({"no"}),
}

# no internal subset, which could declare entities the document uses
_SVG_DOCTYPE_RE = re.compile(r"<!DOCTYPE\s+svg(?:\s[^\[]*)?>")

# character data xml:space could apply to
_TEXT_CONTENT_KINDS = frozenset({TokenKind.TEXT, TokenKind.CDATA})


def _is_default_xml_declaration(token: Token) -> bool:
    if token.kind is not TokenKind.PROCESSING_INSTRUCTION or token.name != "xml":
        return False
    for attr in iter_attributes(token.text):
        allowed = _DEFAULT_XML_DECLARATION.get(attr.name)
        if allowed is None or attr.value is None or attr.value.lower() not in allowed:
            return False
    return True


def _is_svg_doctype(token: Token) -> bool:
    return (
        token.kind is TokenKind.DECLARATION
        and _SVG_DOCTYPE_RE.fullmatch(token.text) is not None
    )


def _declared_prefixes(tokens: List[Token]) -> Set[str]:
    return {
        svg_meta.splitqname(attr.name)[1]
        for token in tokens
        if token.is_opening_tag()
        for attr in iter_attributes(token.text)
        if attr.name.startswith("xmlns:")
    }


def _editor_prefixes(tokens: List[Token], namespaces: AbstractSet[str]) -> Set[str]:
    return {
        svg_meta.splitqname(attr.name)[1]
        for token in tokens
        if token.is_opening_tag()
        for attr in iter_attributes(token.text)
        if attr.name.startswith("xmlns:") and attr.value in namespaces
    }


def _matching_end(tokens: List[Token], start_idx: int) -> Optional[int]:
    name = tokens[start_idx].name
    depth = 0
    for idx in range(start_idx + 1, len(tokens)):
        token = tokens[idx]
        if token.name != name:
            continue
        if token.kind is TokenKind.START_TAG:
            depth += 1
        elif token.kind is TokenKind.END_TAG:
            if depth == 0:
                return idx
            depth -= 1
    return None


def _drop_elements(
    tokens: List[Token], should_drop: Callable[[str], bool]
) -> List[Token]:
    out = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.is_opening_tag() and should_drop(token.name):
            if token.kind is TokenKind.EMPTY_TAG:
                i += 1
                continue
            end = _matching_end(tokens, i)
            # never closed: not provably safe to remove
            if end is not None:
                i = end + 1
                continue
        out.append(token)
        i += 1
    return out


def _drop_attributes(
    tokens: List[Token], should_drop: Callable[[Attribute], bool]
) -> List[Token]:
    return [
        token._replace(text=remove_attributes(token.text, should_drop))
        if token.is_opening_tag()
        else token
        for token in tokens
    ]


def _drop_empty_elements(tokens: List[Token], names: AbstractSet[str]) -> List[Token]:
    out = []
    for token in tokens:
        if token.kind is TokenKind.EMPTY_TAG and svg_meta.strip_prefix(token.name) in names:
            continue
        if (
            token.kind is TokenKind.END_TAG
            and svg_meta.strip_prefix(token.name) in names
            and out
            and out[-1].kind is TokenKind.START_TAG
            and out[-1].name == token.name
        ):
            out.pop()
            continue
        out.append(token)
    return out


def _used_prefixes(tokens: List[Token], candidates: Set[str]) -> Set[str]:
    used = set()
    raw_text = []
    for token in tokens:
        if token.kind is TokenKind.RAW_TEXT:
            raw_text.append(token.text)
            continue
        if token.kind not in (
            TokenKind.START_TAG,
            TokenKind.END_TAG,
            TokenKind.EMPTY_TAG,
        ):
            continue
        used.add(svg_meta.splitqname(token.name)[0])
        if token.is_opening_tag():
            for attr in iter_attributes(token.text):
                prefix, _ = svg_meta.splitqname(attr.name)
                if prefix != "xmlns":
                    used.add(prefix)
    # css attribute selectors may spell a prefix as [xlink\:href]
    css = "".join(raw_text)
    for prefix in candidates - used:
        if f"{prefix}:" in css or f"{prefix}\\:" in css:
            used.add(prefix)
    return used


def _drop_unused_namespaces(tokens: List[Token]) -> List[Token]:
    declared = _declared_prefixes(tokens)
    unused = declared - _used_prefixes(tokens, declared)
    if not unused:
        return tokens
    return _drop_attributes(
        tokens,
        lambda attr: attr.name.startswith("xmlns:")
        and svg_meta.splitqname(attr.name)[1] in unused,
    )


def strip(svg: str, policy: MetadataPolicy = DEFAULT_POLICY) -> str:
    """Removes content that is safe to delete unconditionally.

    Meant to run on the output of svg_normalize.normalize. In order:

    * a default-valued <?xml ...?> declaration
    * <!DOCTYPE svg ...> without an internal subset
    * policy.removable_elements and elements in an editor namespace,
      with their whole subtree
    * attributes in an editor namespace, and those namespace declarations
    * policy.removable_when_empty elements left with no content
    * namespace declarations whose prefix nothing uses
    * xml:space when no text content element holds character data

    A single call reaches a fixpoint: strip(strip(svg)) == strip(svg).
    """
    tokens = list(tokenize(svg))

    if policy.strip_xml_declaration:
        tokens = [t for t in tokens if not _is_default_xml_declaration(t)]
    if policy.strip_svg_doctype:
        tokens = [t for t in tokens if not _is_svg_doctype(t)]

    editor_prefixes = _editor_prefixes(tokens, policy.editor_namespaces)

    def _is_removable_element(name: str) -> bool:
        prefix, local_name = svg_meta.splitqname(name)
        return local_name in policy.removable_elements or prefix in editor_prefixes

    tokens = _drop_elements(tokens, _is_removable_element)

    if editor_prefixes:

        def _is_editor_attribute(attr: Attribute) -> bool:
            prefix, local_name = svg_meta.splitqname(attr.name)
            if prefix == "xmlns":
                return local_name in editor_prefixes
            return prefix in editor_prefixes

        tokens = _drop_attributes(tokens, _is_editor_attribute)

    if policy.removable_when_empty:
        tokens = _drop_empty_elements(tokens, policy.removable_when_empty)

    if policy.strip_unused_namespaces:
        tokens = _drop_unused_namespaces(tokens)

    if policy.strip_xml_space and not any(
        t.preserve and t.kind in _TEXT_CONTENT_KINDS for t in tokens
    ):
        tokens = _drop_attributes(tokens, lambda attr: attr.name == "xml:space")

    return "".join(t.text for t in tokens)
