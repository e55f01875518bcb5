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

"""Turns path arguments into the list of svg files to process."""

import dataclasses
import enum
import os
from pathlib import Path
from typing import Iterable, List, NamedTuple, Union
from absl import logging
from svgc import svg_meta


class PathKind(enum.Enum):
    FILE = enum.auto()
    DIRECTORY = enum.auto()
    NOT_FOUND = enum.auto()


class ResolvedPath(NamedTuple):
    path: Path
    kind: PathKind


@dataclasses.dataclass
class Discovery:
    files: List[Path] = dataclasses.field(default_factory=list)
    # arguments that don't exist
    missing: List[Path] = dataclasses.field(default_factory=list)
    # explicit files without the svg extension
    ignored: List[Path] = dataclasses.field(default_factory=list)
    # directories that could not be listed
    unreadable: List[Path] = dataclasses.field(default_factory=list)


def resolve_path(path: Union[str, os.PathLike]) -> ResolvedPath:
    path = Path(path)
    try:
        resolved = path.resolve(strict=True)
    except (OSError, RuntimeError):
        return ResolvedPath(path, PathKind.NOT_FOUND)
    if resolved.is_dir():
        return ResolvedPath(resolved, PathKind.DIRECTORY)
    if resolved.is_file():
        return ResolvedPath(resolved, PathKind.FILE)
    return ResolvedPath(path, PathKind.NOT_FOUND)


def _sorted_entries(directory: Path) -> List[os.DirEntry]:
    with os.scandir(directory) as it:
        return sorted(it, key=lambda e: e.name)


def _collect(directory: Path, recursive: bool, found: List[Path]):
    for entry in _sorted_entries(directory):
        try:
            if entry.is_file():
                if svg_meta.is_svg_filename(entry.name):
                    found.append(Path(entry.path))
            elif recursive and entry.is_dir(follow_symlinks=False):
                _collect(Path(entry.path), recursive, found)
        except OSError as e:
            # unreadable entries below the top level are simply skipped
            logging.debug("Skipping %s: %s", entry.path, e)


def list_svg_files(directory: Path, recursive: bool = False) -> List[Path]:
    """Lists svg files in directory, in subdirectories too if recursive.

    Raises OSError if directory itself can't be listed.
    """
    found = []
    _collect(Path(directory), recursive, found)
    return found


def find_svg_files(
    paths: Iterable[Union[str, os.PathLike]], recursive: bool = False
) -> Discovery:
    discovery = Discovery()
    files = set()
    for arg in paths:
        resolved = resolve_path(arg)
        if resolved.kind is PathKind.NOT_FOUND:
            discovery.missing.append(resolved.path)
        elif resolved.kind is PathKind.FILE:
            if svg_meta.is_svg_filename(resolved.path.name):
                files.add(resolved.path)
            else:
                discovery.ignored.append(resolved.path)
        else:
            try:
                files.update(list_svg_files(resolved.path, recursive))
            except OSError as e:
                logging.debug("Unable to list %s: %s", resolved.path, e)
                discovery.unreadable.append(resolved.path)
    discovery.files = sorted(files)
    return discovery
