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

"""The default optimizations: normalize, strip metadata, maybe drop fill."""

from svgc.svg_fill import remove_fill as _remove_fill
from svgc.svg_metadata import DEFAULT_POLICY, MetadataPolicy, strip
from svgc.svg_normalize import normalize


# Undecodable bytes survive a decode/encode round trip as lone surrogates
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def decode(data: bytes) -> str:
    return data.decode(_ENCODING, _ERRORS)


def encode(svg: str) -> bytes:
    return svg.encode(_ENCODING, _ERRORS)


def _minify_once(svg: str, remove_fill: bool, policy: MetadataPolicy) -> str:
    svg = normalize(svg)
    svg = strip(svg, policy)
    if remove_fill:
        svg = _remove_fill(svg)
    return svg


def minify(
    svg: str, remove_fill: bool = False, policy: MetadataPolicy = DEFAULT_POLICY
) -> str:
    """Runs the default passes in their fixed order until nothing changes.

    Deleting a comment or element can join the text on either side into new
    markup, e.g. "x <<metadata/>!-- y -->" becomes "x <!-- y -->", which the
    next round removes. Every pass only deletes text or turns whitespace into
    plain spaces, so this terminates.

    Idempotent: minify(minify(svg)) == minify(svg).
    """
    while True:
        result = _minify_once(svg, remove_fill, policy)
        if result == svg:
            return result
        svg = result


def minify_bytes(
    data: bytes, remove_fill: bool = False, policy: MetadataPolicy = DEFAULT_POLICY
) -> bytes:
    return encode(minify(decode(data), remove_fill, policy))
