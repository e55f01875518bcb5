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


import gzip
from absl import app
from absl.testing import flagsaver
import pytest
from svgc import svgc
from svgc.svg_minify import minify_bytes
from svg_test_helpers import *


@pytest.fixture
def star(tmp_path):
    path = tmp_path.resolve() / "star.svg"
    path.write_bytes(load_test_bytes("inkscape.svg"))
    return path


def _main(*args):
    with flagsaver.flagsaver():
        return svgc._run(svgc._parse_flags(["svgc", *(str(a) for a in args)]))


@pytest.mark.parametrize(
    "argv, expected",
    [
        (["svgc", "-rfoz", "a"], ["svgc", "-r", "-f", "-o", "-z", "a"]),
        (["svgc", "-qn", "a"], ["svgc", "-q", "-n", "a"]),
        (["svgc", "-r", "a"], ["svgc", "-r", "a"]),
        # not every letter is a switch
        (["svgc", "-rx", "a"], ["svgc", "-rx", "a"]),
        (["svgc", "--jobs", "2", "a"], ["svgc", "--jobs", "2", "a"]),
        # everything after -- is a path
        (["svgc", "-rz", "--", "-rz"], ["svgc", "-r", "-z", "--", "-rz"]),
    ],
)
def test_expand_short_flags(argv, expected):
    assert svgc._expand_short_flags(argv) == expected


def test_requires_a_path():
    with pytest.raises(app.UsageError):
        _main()


def test_default(star, capsys):
    assert _main(star) == 0
    assert star.read_bytes() == minify_bytes(load_test_bytes("inkscape.svg"))
    out = capsys.readouterr().out
    assert "star.svg:" in out
    assert "Total:" in out


def test_combined_flags(star):
    assert _main("-fz", star.parent) == 0
    data = gzip.decompress(star.with_name("star.svgz").read_bytes())
    assert data == minify_bytes(load_test_bytes("inkscape.svg"), remove_fill=True)
    assert not star.exists()


def test_keep_svg(star):
    assert _main("-z", "--keep_svg", star) == 0
    assert star.read_bytes() == minify_bytes(load_test_bytes("inkscape.svg"))
    assert star.with_name("star.svgz").exists()


def test_recursive(star):
    nested = star.parent / "more" / "star.svg"
    nested.parent.mkdir()
    nested.write_bytes(star.read_bytes())

    assert _main("-nz", star.parent) == 0
    assert nested.exists()

    assert _main("-rnz", star.parent) == 0
    assert not nested.exists()
    assert nested.with_name("star.svgz").exists()


def test_no_action(star, capsys):
    assert _main("-n", star) == 0
    assert star.read_bytes() == load_test_bytes("inkscape.svg")
    assert "No action specified" in capsys.readouterr().out


def test_quiet(star, capsys):
    assert _main("-q", star) == 0
    assert capsys.readouterr().out == ""
    assert _main("-qn", star) == 0
    assert capsys.readouterr().out == ""


def test_missing_path_fails(star):
    assert _main(star, star.parent / "gone.svg") == 1
    assert star.read_bytes() == minify_bytes(load_test_bytes("inkscape.svg"))


def test_jobs(star):
    for name in ("a", "b", "c"):
        star.with_name(f"{name}.svg").write_bytes(star.read_bytes())
    assert _main("--jobs", 3, "-z", star.parent) == 0
    assert sorted(p.name for p in star.parent.iterdir()) == [
        "a.svgz",
        "b.svgz",
        "c.svgz",
        "star.svgz",
    ]


def test_svgo_is_optional(star):
    # whether or not svgo is installed, a missing or failing svgo is not an error
    assert _main("-no", "--svgo_timeout", 30, star) == 0
