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

from typing import Optional, Tuple


# https://www.w3.org/TR/xml/#NT-S
XML_WHITESPACE = " \t\r\n"

SVG_EXTENSION = ".svg"

# Content is copied verbatim up to the matching end tag
RAW_TEXT_ELEMENTS = frozenset({"style", "script"})

# Character data renders only inside these; elsewhere whitespace is inert
WHITESPACE_SIGNIFICANT_ELEMENTS = frozenset(
    {"text", "tspan", "textPath", "foreignObject"}
)

# fill on these means timing (freeze/remove), not paint
ANIMATION_ELEMENTS = frozenset(
    {"animate", "animateColor", "animateMotion", "animateTransform", "set"}
)

EDITOR_NAMESPACES = frozenset(
    {
        "http://www.inkscape.org/namespaces/inkscape",
        "http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd",
        "http://ns.adobe.com/AdobeIllustrator/10.0/",
        "http://ns.adobe.com/AdobeSVGViewerExtensions/3.0/",
        "http://ns.adobe.com/Extensibility/1.0/",
        "http://ns.adobe.com/Flows/1.0/",
        "http://ns.adobe.com/GenericCustomNamespace/1.0/",
        "http://ns.adobe.com/Graphs/1.0/",
        "http://ns.adobe.com/ImageReplacement/1.0/",
        "http://ns.adobe.com/SaveForWeb/1.0/",
        "http://ns.adobe.com/Variables/1.0/",
        "http://ns.adobe.com/XPath/1.0/",
        "http://www.bohemiancoding.com/sketch/ns",
        "http://www.serif.com/",
    }
)


def splitqname(name: str) -> Tuple[Optional[str], str]:
    """Split 'prefix:local' into (prefix, local); prefix is None if absent."""
    prefix, sep, local = name.partition(":")
    if not sep:
        return None, name
    return prefix, local


def strip_prefix(name: str) -> str:
    return splitqname(name)[1]


def is_svg_filename(name: str) -> bool:
    return name.lower().endswith(SVG_EXTENSION)
