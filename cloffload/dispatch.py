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
from time import perf_counter

import numpy as np

import pyopencl as cl

from cloffload.errors import DispatchFailed, TransferFailed


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchTiming:
    """Timing of one dispatch.

    .. attribute:: wall_seconds

        Host wall-clock time from kernel enqueue until the completion event
        was waited on and, if requested, the readback finished.

    .. attribute:: device_seconds

        Device-side execution time of the kernel according to the event's
        profiling counters, or *None* if the queue does not profile.
    """

    wall_seconds: float
    device_seconds: float | None = None

    @property
    def wall_ms(self) -> float:
        return self.wall_seconds * 1e3


def _profiled_seconds(queue: cl.CommandQueue, evt: cl.Event) -> float | None:
    if not queue.properties & cl.command_queue_properties.PROFILING_ENABLE:
        return None

    try:
        return (evt.profile.end - evt.profile.start) * 1e-9
    except cl.Error as err:
        logger.warning("could not read kernel profiling info: %s", err)
        return None


def read_output(queue: cl.CommandQueue, out_buffer: cl.Buffer,
        host_out: np.ndarray, element_count: int) -> None:
    """Blocking device-to-host copy that overwrites all of *host_out*."""
    if host_out.size != element_count:
        raise TransferFailed(
                f"output array has {host_out.size} elements, "
                f"expected {element_count}")
    if not host_out.flags.c_contiguous or not host_out.flags.writeable:
        raise TransferFailed("output array must be contiguous and writeable")

    if not element_count:
        return

    try:
        cl.enqueue_copy(queue, host_out, out_buffer, is_blocking=True)
    except cl.Error as err:
        raise TransferFailed.from_cl_error(
                "could not read back the output", err) from err


def dispatch_and_wait(queue: cl.CommandQueue, kernel: cl.Kernel,
        element_count: int,
        out_buffer: cl.Buffer | None = None,
        host_out: np.ndarray | None = None) -> DispatchTiming:
    """Launch *kernel* over a 1D range of *element_count* work items and
    block until it has completed.

    The work-group size is left to the implementation. If *host_out* is
    given, *out_buffer* is read back into it after the wait, and the
    readback is included in the measured wall time.

    All kernel arguments must be bound beforehand.
    """
    if (out_buffer is None) != (host_out is None):
        raise ValueError("out_buffer and host_out must be given together")

    start = perf_counter()

    try:
        if element_count:
            evt = cl.enqueue_nd_range_kernel(
                    queue, kernel, (element_count,), None)
        else:
            # empty NDRanges are invalid before CL 2.1
            evt = cl.enqueue_marker(queue)
    except cl.Error as err:
        raise DispatchFailed.from_cl_error(
                "could not enqueue kernel", err) from err

    try:
        evt.wait()
    except cl.Error as err:
        raise DispatchFailed.from_cl_error(
                "waiting for kernel completion failed", err) from err

    if host_out is not None:
        read_output(queue, out_buffer, host_out, element_count)

    wall = perf_counter() - start

    device_seconds = None
    if element_count:
        device_seconds = _profiled_seconds(queue, evt)

    logger.debug("dispatched %d work items in %.3f ms", element_count, wall*1e3)

    return DispatchTiming(wall_seconds=wall, device_seconds=device_seconds)
