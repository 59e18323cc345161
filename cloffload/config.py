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

import os
from dataclasses import dataclass, field, replace
from collections.abc import Mapping, Sequence

from pytools import strtobool


DEFAULT_KERNEL_NAME = "vector_add_ocl"


def default_source_path() -> str:
    """Path of the kernel source shipped with the package."""
    from importlib.resources import files

    return str(files("cloffload") / "cl" / "vector_ops_ocl.cl")


@dataclass(frozen=True)
class PipelineConfig:
    """Settings for one compile-dispatch-wait-readback cycle.

    .. attribute:: source_path

        Path of the OpenCL C file holding the kernel.

    .. attribute:: kernel_name

        Name of the entry point to launch.

    .. attribute:: platform

        Index or (case-insensitive) name substring of the platform to
        search for devices. *None* selects the first platform.

    .. attribute:: build_options

        Extra options passed to the OpenCL compiler.

    .. attribute:: profiling

        If *True*, the command queue is created with profiling enabled and
        the device-side kernel time is reported.
    """

    source_path: str = field(default_factory=default_source_path)
    kernel_name: str = DEFAULT_KERNEL_NAME
    platform: str | None = None
    build_options: Sequence[str] = ()
    profiling: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None,
            **overrides) -> PipelineConfig:
        """Read ``CLOFFLOAD_*`` environment variables, then apply
        *overrides* (entries whose value is *None* are ignored).
        """
        if environ is None:
            environ = os.environ

        kwargs = {}
        if environ.get("CLOFFLOAD_KERNEL_SOURCE"):
            kwargs["source_path"] = environ["CLOFFLOAD_KERNEL_SOURCE"]
        if environ.get("CLOFFLOAD_KERNEL_NAME"):
            kwargs["kernel_name"] = environ["CLOFFLOAD_KERNEL_NAME"]
        if environ.get("CLOFFLOAD_PLATFORM"):
            kwargs["platform"] = environ["CLOFFLOAD_PLATFORM"]
        if environ.get("CLOFFLOAD_BUILD_OPTIONS"):
            kwargs["build_options"] = tuple(
                    environ["CLOFFLOAD_BUILD_OPTIONS"].split())
        kwargs["profiling"] = strtobool(environ.get("CLOFFLOAD_PROFILE", "false"))

        result = cls(**kwargs)
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if overrides:
            result = replace(result, **overrides)

        return result
