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

"""Runs the configured stages over each file and tallies the results.

Per file: default optimizations, then the external optimizer, then svgz
compression, then write back. Files are independent; a failure in one never
stops the others.
"""

from concurrent.futures import ThreadPoolExecutor
import dataclasses
import os
from pathlib import Path
import tempfile
import threading
from typing import Iterable, List, Optional, Union
import zlib
from absl import logging
from svgc import svg_files, svgz
from svgc.svg_minify import minify_bytes
from svgc.svg_optimizer import Optimizer, OptimizerError


class PipelineError(Exception):
    """A hard failure: the file could not be processed."""


class InputNotFoundError(PipelineError):
    pass


class UnreadableFileError(PipelineError):
    pass


class WriteFailureError(PipelineError):
    pass


class CompressionFailureError(PipelineError):
    pass


@dataclasses.dataclass(frozen=True)
class PipelineOptions:
    run_default_passes: bool = True
    remove_fill: bool = False
    run_external_optimizer: bool = False
    compress_to_container: bool = False
    quiet: bool = False
    # leave icon.svg next to icon.svgz
    keep_uncompressed: bool = False

    def has_actions(self) -> bool:
        return (
            self.run_default_passes
            or self.run_external_optimizer
            or self.compress_to_container
        )


@dataclasses.dataclass(frozen=True)
class FileTask:
    path: Path
    options: PipelineOptions


@dataclasses.dataclass
class FileOutcome:
    path: Path
    output_path: Optional[Path] = None
    size_before: int = 0
    size_after: int = 0
    error: Optional[PipelineError] = None
    warnings: List[str] = dataclasses.field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


def _display_path(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


def _percent(before: int, after: int) -> float:
    return (before - after) / before * 100 if before else 0.0


class RunSummary:
    """Collects FileOutcomes; safe to add to from several workers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._outcomes: List[FileOutcome] = []

    def add(self, outcome: FileOutcome):
        with self._lock:
            self._outcomes.append(outcome)

    @property
    def outcomes(self) -> List[FileOutcome]:
        with self._lock:
            return sorted(self._outcomes, key=lambda o: o.path)

    @property
    def hard_failures(self) -> List[FileOutcome]:
        return [o for o in self.outcomes if not o.ok]

    def exit_code(self) -> int:
        return 1 if self.hard_failures else 0

    def format_report(self, color: bool = False) -> str:
        lines = []
        total_before = total_after = 0
        for outcome in self.outcomes:
            if not outcome.ok:
                continue
            total_before += outcome.size_before
            total_after += outcome.size_after
            name = _display_path(outcome.path)
            if outcome.output_path is not None and outcome.output_path != outcome.path:
                name += f" -> {_display_path(outcome.output_path)}"
            percent = _percent(outcome.size_before, outcome.size_after)
            percent_str = f"{percent:.2f}%"
            if color and percent > 0:
                percent_str = f"\x1b[32m{percent_str}\x1b[0m"
            lines.append(f"{name}:")
            lines.append(
                f"{outcome.size_before} - {percent_str} = {outcome.size_after} bytes"
            )
            lines.append("")
        saved = max(total_before - total_after, 0)
        lines.append(
            f"Total: {total_before} -> {total_after} bytes "
            f"(-{saved} bytes, -{_percent(total_before, total_after):.2f}%)"
        )
        return "\n".join(lines)


def _read(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as e:
        raise InputNotFoundError(f"{path}: {e.strerror}") from e
    except OSError as e:
        raise UnreadableFileError(f"{path}: {e.strerror or e}") from e


def _write(path: Path, data: bytes, mode_from: Optional[Path] = None):
    """Replaces path atomically; a failure leaves any previous file intact."""
    fd, tmp = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        if mode_from is not None:
            os.chmod(tmp, os.stat(mode_from).st_mode & 0o7777)
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def _write_output(path: Path, data: bytes, mode_from: Optional[Path] = None):
    try:
        _write(path, data, mode_from)
    except OSError as e:
        raise WriteFailureError(f"{path}: {e.strerror or e}") from e


def _optimize_externally(
    outcome: FileOutcome, optimizer: Optional[Optimizer], data: bytes
) -> bytes:
    if optimizer is None:
        outcome.warnings.append("No external optimizer configured")
        logging.warning("%s: no external optimizer configured", outcome.path)
        return data
    try:
        return optimizer(data)
    except OptimizerError as e:
        # soft: keep what the previous stage produced
        outcome.warnings.append(str(e))
        logging.warning("%s: external optimizer skipped: %s", outcome.path, e)
        return data


def _run_stages(
    task: FileTask,
    outcome: FileOutcome,
    optimizer: Optional[Optimizer],
    compressor: svgz.Compressor,
):
    options = task.options
    original = _read(task.path)
    outcome.size_before = len(original)

    data = original
    if options.run_default_passes:
        data = minify_bytes(data, options.remove_fill)
    if options.run_external_optimizer:
        data = _optimize_externally(outcome, optimizer, data)

    if options.compress_to_container:
        uncompressed = data
        try:
            data = compressor(uncompressed)
        except (OSError, ValueError, zlib.error) as e:
            raise CompressionFailureError(f"{task.path}: {e}") from e
        output_path = svgz.svgz_path(task.path)
        _write_output(output_path, data, mode_from=task.path)
        if options.keep_uncompressed:
            # the kept .svg holds what was compressed
            if uncompressed != original:
                _write_output(task.path, uncompressed, mode_from=task.path)
        else:
            try:
                task.path.unlink()
            except OSError as e:
                raise WriteFailureError(
                    f"{task.path}: unable to remove after compression: {e.strerror or e}"
                ) from e
    else:
        output_path = task.path
        if data != original:
            _write_output(output_path, data, mode_from=task.path)

    outcome.output_path = output_path
    outcome.size_after = len(data)


def process_file(
    task: FileTask,
    optimizer: Optional[Optimizer] = None,
    compressor: svgz.Compressor = svgz.compress,
) -> FileOutcome:
    """Runs every enabled stage on one file; never raises PipelineError."""
    outcome = FileOutcome(task.path)
    try:
        _run_stages(task, outcome, optimizer, compressor)
    except PipelineError as e:
        outcome.error = e
        logging.error("%s", e)
        return outcome
    logging.debug(
        "%s: %d -> %d bytes", task.path, outcome.size_before, outcome.size_after
    )
    return outcome


def run(
    paths: Iterable[Union[str, os.PathLike]],
    options: PipelineOptions,
    recursive: bool = False,
    jobs: int = 1,
    optimizer: Optional[Optimizer] = None,
    compressor: svgz.Compressor = svgz.compress,
) -> RunSummary:
    summary = RunSummary()
    discovery = svg_files.find_svg_files(paths, recursive)

    for path in discovery.missing:
        error = InputNotFoundError(f"{path}: no such file or directory")
        logging.error("%s", error)
        summary.add(FileOutcome(path, error=error))
    for path in discovery.unreadable:
        error = UnreadableFileError(f"{path}: unable to list directory")
        logging.error("%s", error)
        summary.add(FileOutcome(path, error=error))
    for path in discovery.ignored:
        logging.warning("%s is neither an svg file nor a directory, skipped", path)

    tasks = [FileTask(path, options) for path in discovery.files]
    logging.info("Processing %d svg file(s)", len(tasks))
    if jobs <= 1 or len(tasks) <= 1:
        for task in tasks:
            summary.add(process_file(task, optimizer, compressor))
        return summary

    with ThreadPoolExecutor(max_workers=jobs) as executor:
        futures = [
            executor.submit(process_file, task, optimizer, compressor)
            for task in tasks
        ]
        for future in futures:
            summary.add(future.result())
    return summary
