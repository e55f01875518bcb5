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

"""Hands svg bytes to an external optimizer, svgo by default.

Anything callable as bytes -> bytes that raises OptimizerError on failure
can stand in for ExternalOptimizer.
"""

import functools
import shutil
import subprocess
from typing import Callable, Optional, Sequence
from absl import logging


Optimizer = Callable[[bytes], bytes]

# read stdin, write stdout
SVGO_ARGS = ("--input", "-", "--output", "-")


class OptimizerError(Exception):
    pass


class OptimizerNotFoundError(OptimizerError):
    pass


class OptimizerProcessError(OptimizerError):
    pass


class ExternalOptimizer:
    def __init__(
        self,
        executable: str = "svgo",
        args: Sequence[str] = SVGO_ARGS,
        passes: int = 2,
        timeout: Optional[float] = None,
    ):
        if passes < 1:
            raise ValueError(f"passes must be at least 1, got {passes}")
        self.executable = executable
        self.args = tuple(args)
        # svgo often finds a little more to shave on a second run
        self.passes = passes
        self.timeout = timeout

    @functools.cached_property
    def path(self) -> Optional[str]:
        return shutil.which(self.executable)

    def available(self) -> bool:
        return self.path is not None

    def _run_once(self, path: str, data: bytes) -> bytes:
        cmd = [path, *self.args]
        try:
            result = subprocess.run(
                cmd,
                input=data,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise OptimizerProcessError(
                f"{self.executable} timed out after {self.timeout}s"
            ) from e
        except OSError as e:
            raise OptimizerProcessError(f"Unable to run {self.executable}: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", "replace").strip()
            raise OptimizerProcessError(
                f"{self.executable} exited with status {result.returncode}: {stderr}"
            )
        if not result.stdout.strip():
            raise OptimizerProcessError(f"{self.executable} produced no output")
        return result.stdout

    def __call__(self, data: bytes) -> bytes:
        path = self.path
        if path is None:
            raise OptimizerNotFoundError(f"{self.executable} not found on PATH")
        for i in range(self.passes):
            logging.debug("%s pass %d/%d", self.executable, i + 1, self.passes)
            data = self._run_once(path, data)
        return data
