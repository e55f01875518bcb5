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

from svgc import svg_meta
from svgc.svg_lexer import Attribute, remove_attributes, tokenize


def _is_fill(attr: Attribute) -> bool:
    return attr.name == "fill" and attr.quote is not None


def remove_fill(svg: str) -> str:
    """Deletes fill="..." attributes, typically so css or currentColor decides.

    Only attributes of tags are touched: fill inside <style>, comments,
    text or other attribute values (style="fill:red") stays. Animation
    elements keep fill, it means freeze/remove there.
    """
    out = []
    for token in tokenize(svg):
        if (
            token.is_opening_tag()
            and svg_meta.strip_prefix(token.name) not in svg_meta.ANIMATION_ELEMENTS
        ):
            out.append(remove_attributes(token.text, _is_fill))
        else:
            out.append(token.text)
    return "".join(out)
