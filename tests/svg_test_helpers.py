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


from lxml import etree
import os


def svgns():
    return "http://www.w3.org/2000/svg"


def xlinkns():
    return "http://www.w3.org/1999/xlink"


def _locate_test_file(filename):
    return os.path.join(os.path.dirname(__file__), filename)


def load_test_svg(filename):
    with open(_locate_test_file(filename), encoding="utf-8") as f:
        return f.read()


def load_test_bytes(filename):
    with open(_locate_test_file(filename), "rb") as f:
        return f.read()


def svg_string(*els, attrs=""):
    return (
        f'<svg xmlns="{svgns()}" viewBox="0 0 24 24"{attrs}>'
        + "".join(els)
        + "</svg>"
    )


def parse(svg):
    """Parses with lxml; raises if the svg is no longer well formed."""
    if isinstance(svg, str):
        svg = svg.encode("utf-8")
    return etree.fromstring(svg)


def text_content(svg):
    # character data of every text element, in document order
    root = parse(svg)
    return [
        "".join(el.itertext())
        for el in root.iter(f"{{{svgns()}}}text")
    ]
