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

"""Compress svg files in place.

Usage:
svgc -rz icons/
<every icons/**/*.svg minified and replaced by a .svgz>
"""
import re
import sys
from typing import List
from absl import app
from absl import flags
from absl import logging
from svgc import svg_pipeline
from svgc.svg_optimizer import ExternalOptimizer
from svgc.svg_pipeline import PipelineOptions


FLAGS = flags.FLAGS


flags.DEFINE_bool("recursive", False, "Recursively process directories", short_name="r")
flags.DEFINE_bool(
    "remove_fill", False, 'Remove fill="..." attributes', short_name="f"
)
flags.DEFINE_bool(
    "svgo", False, "Use svgo if it exists in the system", short_name="o"
)
flags.DEFINE_bool("svgz", False, "Compress to .svgz format", short_name="z")
flags.DEFINE_bool(
    "no_default", False, "Don't perform default optimizations", short_name="n"
)
flags.DEFINE_bool("quiet", False, "Only output error messages", short_name="q")
flags.DEFINE_bool(
    "keep_svg", False, "With --svgz, keep the .svg next to the .svgz"
)
flags.DEFINE_integer(
    "jobs", 1, "Number of files to process concurrently", lower_bound=1
)
flags.DEFINE_float(
    "svgo_timeout", None, "Seconds a single svgo run may take", lower_bound=0
)


# short boolean flags that may share one argument, e.g. -rfoz
_COMBINABLE = frozenset("rfozqn")
_COMBINED_RE = re.compile(f"-[{''.join(sorted(_COMBINABLE))}]{{2,}}")


def _expand_short_flags(argv: List[str]) -> List[str]:
    """-rfoz => -r -f -o -z; absl only knows one short flag per argument."""
    expanded = argv[:1]
    for i, arg in enumerate(argv[1:], start=1):
        if arg == "--":
            expanded.extend(argv[i:])
            break
        if _COMBINED_RE.fullmatch(arg):
            expanded.extend(f"-{c}" for c in arg[1:])
        else:
            expanded.append(arg)
    return expanded


def _parse_flags(argv: List[str]) -> List[str]:
    return app.parse_flags_with_usage(_expand_short_flags(argv))


def _options_from_flags() -> PipelineOptions:
    return PipelineOptions(
        run_default_passes=not FLAGS.no_default,
        remove_fill=FLAGS.remove_fill,
        run_external_optimizer=FLAGS.svgo,
        compress_to_container=FLAGS.svgz,
        quiet=FLAGS.quiet,
        keep_uncompressed=FLAGS.keep_svg,
    )


def _run(argv):
    paths = argv[1:]
    if not paths:
        raise app.UsageError("Provide at least one svg file or directory")

    options = _options_from_flags()
    if options.quiet:
        logging.set_verbosity(logging.ERROR)

    if not options.has_actions():
        if not options.quiet:
            print("No action specified, files were not modified.")
            print("Type 'svgc --help' for more information.")
        return 0

    optimizer = None
    if options.run_external_optimizer:
        optimizer = ExternalOptimizer(timeout=FLAGS.svgo_timeout)
        if not optimizer.available():
            logging.warning(
                "svgo was not found; files will not be optimized with svgo"
            )

    summary = svg_pipeline.run(
        paths,
        options,
        recursive=FLAGS.recursive,
        jobs=FLAGS.jobs,
        optimizer=optimizer,
    )

    if not options.quiet and summary.outcomes:
        print(summary.format_report(color=sys.stdout.isatty()))
    return summary.exit_code()


def main(argv=None):
    # We don't seem to be __main__ when run as cli tool installed by setuptools
    app.run(_run, argv=argv, flags_parser=_parse_flags)


if __name__ == "__main__":
    main()
