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

import logging
import warnings
from collections.abc import Sequence

import pyopencl as cl

from cloffload.errors import (
    CompilationFailed, ContextCreationFailed, EntryPointNotFound,
    KernelCreationFailed, QueueCreationFailed, SourceFileNotFound)


logger = logging.getLogger(__name__)


# {{{ context and queue

def create_context(device: cl.Device) -> cl.Context:
    try:
        return cl.Context([device])
    except cl.Error as err:
        raise ContextCreationFailed.from_cl_error(
                "could not create a context", err) from err


def create_queue(context: cl.Context, device: cl.Device,
        profiling: bool = False) -> cl.CommandQueue:
    kwargs = {}
    if profiling:
        kwargs["properties"] = cl.command_queue_properties.PROFILING_ENABLE

    try:
        return cl.CommandQueue(context, device, **kwargs)
    except cl.Error as err:
        raise QueueCreationFailed.from_cl_error(
                "could not create a command queue", err) from err

# }}}


# {{{ program build

def read_source(path: str) -> str:
    try:
        with open(path) as inf:
            return inf.read()
    except OSError as err:
        raise SourceFileNotFound(
                f"could not read kernel source '{path}': {err.strerror}",
                path=path) from err


def _get_build_log(program: cl.Program, device: cl.Device) -> str:
    try:
        log = program.get_build_info(device, cl.program_build_info.LOG)
    except cl.Error as err:
        logger.warning("could not retrieve build log: %s", err)
        return ""

    if isinstance(log, bytes):
        log = log.decode("utf-8", errors="replace")
    return log.strip()


def build_program(context: cl.Context, device: cl.Device, source_path: str,
        options: Sequence[str] | None = None) -> cl.Program:
    """Read *source_path* and compile it for *device*.

    The program is always compiled from source: the on-disk binary cache is
    bypassed so that exactly one compilation happens per run.

    :raises SourceFileNotFound: if *source_path* cannot be read.
    :raises CompilationFailed: if the compiler rejects the source. The
        exception's ``log`` holds the compiler diagnostics.
    """
    source = read_source(source_path)
    options = list(options or [])

    program = cl.Program(context, source)
    with warnings.catch_warnings():
        # Binds the raw program now: no binary cache, build log kept on failure.
        warnings.simplefilter("ignore")
        program.get_info(cl.program_info.NUM_DEVICES)

    logger.debug("building '%s' for '%s' (options: %s)",
            source_path, device.name.strip(), " ".join(options) or "none")

    try:
        program.build(options=options, devices=[device])
    except cl.Error as err:
        log = _get_build_log(program, device) or str(err)
        msg = f"could not build '{source_path}'"
        if options:
            msg += " (options: %s)" % " ".join(options)
        raise CompilationFailed(msg, log=log, code=err.code) from err

    log = _get_build_log(program, device)
    if log:
        logger.debug("build log for '%s':\n%s", source_path, log)

    return program

# }}}


# {{{ kernel resolution

def _kernel_names(program: cl.Program) -> list[str] | None:
    try:
        names = program.get_info(cl.program_info.KERNEL_NAMES)
    except cl.Error:
        # pre-1.2 implementations cannot enumerate kernels
        return None

    return [name.strip() for name in names.split(";") if name.strip()]


def resolve_kernel(program: cl.Program, name: str) -> cl.Kernel:
    """Return a new :class:`pyopencl.Kernel` for entry point *name*.

    :raises EntryPointNotFound: if *program* has no kernel called *name*.
    :raises KernelCreationFailed: if the driver refuses to create the kernel.
    """
    names = _kernel_names(program)
    if names is not None and name not in names:
        raise EntryPointNotFound(
                "kernel '{}' not found in program (available: {})".format(
                    name, ", ".join(names) or "none"),
                name=name)

    try:
        kernel = cl.Kernel(program, name)
        # Nvidia does not raise errors even for invalid names,
        # but this will give an error if the kernel is invalid.
        kernel.num_args  # noqa: B018
    except cl.Error as err:
        if err.code == cl.status_code.INVALID_KERNEL_NAME:
            raise EntryPointNotFound.from_cl_error(
                    f"kernel '{name}' not found in program", err,
                    name=name) from err
        raise KernelCreationFailed.from_cl_error(
                f"could not create kernel '{name}'", err) from err

    return kernel

# }}}

# vim: foldmethod=marker
