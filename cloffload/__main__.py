from __future__ import annotations


__copyright__ = "Copyright (C) 2026 cloffload contributors"

__license__ = """
Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in
all copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
THE SOFTWARE.
"""

import argparse
import logging
import os
import re
import sys
from collections.abc import Sequence

import numpy as np
from pytools import strtobool

from cloffload.config import PipelineConfig
from cloffload.errors import CompilationFailed, OffloadError
from cloffload.memory import ELEMENT_DTYPE
from cloffload.pipeline import Pipeline


logger = logging.getLogger("cloffload")

DEFAULT_SIZE = 100_000_000
SEPARATOR = "-"*28


# {{{ host-side helpers

def parse_size(text: str) -> int:
    """Parse like C's ``atoi``: optional sign and leading digits, else 0.
    The result is clamped to the range of a 32-bit ``int``.
    """
    match = re.match(r"\s*([+-]?\d+)", text)
    if match is None:
        return 0
    info = np.iinfo(np.int32)
    return min(max(int(match.group(1)), int(info.min)), int(info.max))


def random_host_array(size: int, rng: np.random.Generator | None = None
        ) -> np.ndarray:
    if rng is None:
        rng = np.random.default_rng()
    return rng.integers(0, 100, size, dtype=ELEMENT_DTYPE)


def format_array(ary: np.ndarray, edge: int = 5) -> str:
    """Render all of *ary*, or only its first and last *edge* elements if
    it has more than ``3*edge`` elements.
    """
    if ary.size > 3*edge:
        head = " ".join(str(x) for x in ary[:edge])
        tail = " ".join(str(x) for x in ary[-edge:])
        return f"{head}  .....  {tail}"
    return " ".join(str(x) for x in ary)


def print_array(ary: np.ndarray, file=None) -> None:
    if file is None:
        file = sys.stdout
    print(format_array(ary), file=file)
    print(SEPARATOR, file=file)

# }}}


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
            prog="cloffload",
            description="Add two random int vectors on an OpenCL device.")
    parser.add_argument("size", nargs="?", default=None,
            help=f"number of elements (default: {DEFAULT_SIZE})")
    parser.add_argument("--kernel-source",
            help="OpenCL C file holding the kernel")
    parser.add_argument("--kernel-name",
            help="name of the kernel to launch")
    parser.add_argument("--platform",
            help="index or name of the OpenCL platform to use")
    parser.add_argument("--profile", action="store_true", default=None,
            help="report the device-side kernel time as well")
    parser.add_argument("--no-print", dest="print_arrays", action="store_false",
            default=strtobool(os.environ.get("CLOFFLOAD_PRINT", "true")),
            help="do not print the arrays")
    parser.add_argument("-v", "--verbose", action="count", default=0,
            help="log more (repeat for debug output)")
    return parser


def _setup_logging(verbosity: int) -> None:
    level = os.environ.get("CLOFFLOAD_LOG_LEVEL")
    if verbosity:
        level = logging.INFO if verbosity == 1 else logging.DEBUG
    elif level is None:
        level = logging.WARNING
    else:
        level = level.upper()

    logging.basicConfig(level=level,
            format="%(name)-12s: %(levelname)-8s %(message)s")


def main(argv: Sequence[str] | None = None) -> int:
    args = get_parser().parse_args(argv)
    _setup_logging(args.verbose)

    size = DEFAULT_SIZE if args.size is None else parse_size(args.size)
    if size < 0:
        print(f"invalid array size: {args.size}", file=sys.stderr)
        return 1
    logger.info("adding two vectors of %d elements", size)

    config = PipelineConfig.from_env(
            source_path=args.kernel_source,
            kernel_name=args.kernel_name,
            platform=args.platform,
            profiling=args.profile)

    rng = np.random.default_rng()
    try:
        v1 = random_host_array(size, rng)
        v2 = random_host_array(size, rng)
    except MemoryError:
        print(f"could not allocate host arrays of {size} elements",
                file=sys.stderr)
        return 1

    if args.print_arrays:
        print_array(v1)
        print_array(v2)

    try:
        with Pipeline(config) as pipe:
            result = pipe.run(v1, v2)
    except OffloadError as err:
        print(f"{err.stage}: {err}", file=sys.stderr)
        if isinstance(err, CompilationFailed):
            print(err.log, file=sys.stderr)
        return 1

    if args.print_arrays:
        print_array(result.output)

    print("Kernel Execution Time: %f ms" % result.timing.wall_ms)
    if result.timing.device_seconds is not None:
        print("Device Kernel Time: %f ms" % (result.timing.device_seconds * 1e3))

    return 0


if __name__ == "__main__":
    sys.exit(main())

# vim: foldmethod=marker
