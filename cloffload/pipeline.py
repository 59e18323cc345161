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
from dataclasses import dataclass

import numpy as np

import pyopencl as cl

from cloffload.config import PipelineConfig
from cloffload.device import select_device
from cloffload.dispatch import DispatchTiming, dispatch_and_wait
from cloffload.errors import TransferFailed
from cloffload.memory import (
    ELEMENT_DTYPE, DeviceBuffers, allocate_buffers, bind_arguments,
    upload_inputs)
from cloffload.program import (
    build_program, create_context, create_queue, resolve_kernel)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    output: np.ndarray
    timing: DispatchTiming


def _as_element_array(name: str, ary) -> np.ndarray:
    ary = np.asarray(ary)
    if ary.size == 0:
        lossless = True
    elif ary.dtype.kind in "iu":
        # integer lists come in as int64; accept them when every value fits
        info = np.iinfo(ELEMENT_DTYPE)
        lossless = bool(info.min <= ary.min() and ary.max() <= info.max)
    else:
        lossless = np.can_cast(ary.dtype, ELEMENT_DTYPE, "safe")

    if not lossless:
        raise TransferFailed(
                f"input '{name}' of dtype {ary.dtype} cannot be converted to "
                f"{np.dtype(ELEMENT_DTYPE)} without loss")

    return np.ascontiguousarray(ary, dtype=ELEMENT_DTYPE)


class Pipeline:
    """Owns every OpenCL resource of one vector-add run.

    The constructor selects a device and creates the context, program,
    command queue and kernel. :meth:`run` allocates the buffers, uploads
    the inputs, binds the kernel arguments, dispatches, waits, and reads
    back. :meth:`close` releases everything in reverse dependency order:
    buffers, kernel, queue, program, context.

    Use as a context manager to have :meth:`close` called on every exit
    path::

        with Pipeline(PipelineConfig()) as pipe:
            result = pipe.run(a, b)

    .. attribute:: device
    .. attribute:: context
    .. attribute:: program
    .. attribute:: queue
    .. attribute:: kernel
    .. attribute:: buffers

        A :class:`~cloffload.memory.DeviceBuffers`, or *None* before
        :meth:`run` and after :meth:`close`.
    """

    def __init__(self, config: PipelineConfig | None = None,
            device: cl.Device | None = None) -> None:
        if config is None:
            config = PipelineConfig.from_env()

        self.config = config
        self.device = device
        self.context = None
        self.program = None
        self.queue = None
        self.kernel = None
        self.buffers: DeviceBuffers | None = None
        self.closed = False

        try:
            if device is None:
                device = select_device(config.platform)
            self.device = device

            self.context = create_context(device)
            self.program = build_program(self.context, device,
                    config.source_path, options=config.build_options)
            self.queue = create_queue(self.context, device,
                    profiling=config.profiling)
            self.kernel = resolve_kernel(self.program, config.kernel_name)
        except BaseException:
            self.close()
            raise

        logger.debug("pipeline ready on %s", device)

    def __enter__(self) -> Pipeline:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def run(self, host_a: np.ndarray, host_b: np.ndarray) -> RunResult:
        """Compute ``host_a + host_b`` on the device.

        :returns: a :class:`RunResult` whose *output* is a new array.
        """
        if self.closed:
            raise RuntimeError("pipeline is closed")
        if self.buffers is not None:
            raise RuntimeError("pipeline has already run")

        host_a = _as_element_array("a", host_a)
        host_b = _as_element_array("b", host_b)
        if host_a.shape != host_b.shape or host_a.ndim != 1:
            raise TransferFailed(
                    "inputs must be 1D arrays of equal length, got shapes "
                    f"{host_a.shape} and {host_b.shape}")

        element_count = host_a.size
        self.buffers = allocate_buffers(self.context, element_count,
                dtype=ELEMENT_DTYPE)
        upload_inputs(self.queue, self.buffers, host_a, host_b)
        bind_arguments(self.kernel, element_count, self.buffers)

        output = np.empty(element_count, dtype=ELEMENT_DTYPE)
        timing = dispatch_and_wait(self.queue, self.kernel, element_count,
                out_buffer=self.buffers.out, host_out=output)

        return RunResult(output=output, timing=timing)

    # {{{ teardown

    def _drop(self, name: str) -> None:
        # kernels, programs and contexts have no explicit release in
        # pyopencl and go away with their last reference
        if getattr(self, name) is None:
            return

        setattr(self, name, None)
        logger.debug("dropped %s", name)

    def _release_queue(self) -> None:
        if self.queue is None:
            return

        try:
            self.queue._finalize()
        except cl.Error as err:
            logger.warning("releasing command queue failed: %s", str(err))
        else:
            logger.debug("released queue")
        self.queue = None

    def close(self) -> None:
        """Release all resources. Errors are logged, not raised.
        Calling this more than once is harmless.
        """
        if self.queue is not None:
            # nothing may be in flight once the buffers go away
            try:
                self.queue.finish()
            except cl.Error as err:
                logger.warning("finishing command queue failed: %s", str(err))

        if self.buffers is not None:
            self.buffers.release()
            self.buffers = None

        self._drop("kernel")
        self._release_queue()

        self._drop("program")
        self._drop("context")

        self.closed = True

    # }}}


def run_vector_add(host_a: np.ndarray, host_b: np.ndarray,
        config: PipelineConfig | None = None) -> RunResult:
    """One compile-dispatch-wait-readback cycle computing ``host_a + host_b``."""
    with Pipeline(config) as pipe:
        return pipe.run(host_a, host_b)

# vim: foldmethod=marker
