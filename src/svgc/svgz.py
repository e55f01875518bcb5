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
from pathlib import Path
from typing import Callable


Compressor = Callable[[bytes], bytes]

SVGZ_SUFFIX = "z"
DEFAULT_LEVEL = 9


def compress(data: bytes, level: int = DEFAULT_LEVEL) -> bytes:
    # mtime=0 keeps the header, and so the output, a pure function of data
    return gzip.compress(data, compresslevel=level, mtime=0)


def svgz_path(path: Path) -> Path:
    """icon.svg => icon.svgz"""
    return path.with_name(path.name + SVGZ_SUFFIX)
