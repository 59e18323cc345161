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

from cloffload.errors import AllocationFailed, ArgumentBindingFailed, TransferFailed


logger = logging.getLogger(__name__)

ELEMENT_DTYPE = np.dtype(np.int32)


def release_mem_object(name: str, mem: cl.MemoryObject | None) -> bool:
    """Release *mem*, logging (not raising) driver errors.

    :returns: *True* if the release succeeded or there was nothing to release.
    """
    if mem is None:
        return True

    try:
        mem.release()
    except cl.Error as err:
        logger.warning("releasing %s failed: %s", name, err)
        return False

    logger.debug("released %s", name)
    return True


# {{{ allocation

@dataclass
class DeviceBuffers:
    """The two input buffers and the output buffer of one run.

    .. attribute:: element_count

        Number of elements the run operates on. The buffers hold at least
        one element, since zero-sized buffers are rejected by OpenCL.
    """

    a: cl.Buffer | None
    b: cl.Buffer | None
    out: cl.Buffer | None
    element_count: int
    dtype: np.dtype = ELEMENT_DTYPE

    @property
    def nbytes(self) -> int:
        return self.element_count * self.dtype.itemsize

    def release(self) -> bool:
        """Release all buffers still held. Safe to call repeatedly."""
        ok = True
        for name in ("a", "b", "out"):
            ok = release_mem_object(f"buffer '{name}'", getattr(self, name)) and ok
            setattr(self, name, None)
        return ok


def allocate_buffers(context: cl.Context, element_count: int,
        dtype=ELEMENT_DTYPE) -> DeviceBuffers:
    """Allocate three read-write buffers of *element_count* elements.

    If one allocation fails, the buffers already allocated by this call are
    released before :exc:`AllocationFailed` propagates.
    """
    if element_count < 0:
        raise AllocationFailed(f"invalid element count {element_count}")

    dtype = np.dtype(dtype)
    size = max(element_count, 1) * dtype.itemsize

    allocated: list[cl.Buffer] = []
    for name in ("a", "b", "out"):
        try:
            allocated.append(cl.Buffer(context, cl.mem_flags.READ_WRITE, size))
        except cl.Error as err:
            for prev_name, buf in zip(("a", "b"), allocated):
                release_mem_object(f"buffer '{prev_name}'", buf)
            raise AllocationFailed.from_cl_error(
                    f"could not allocate {size} bytes for buffer '{name}'",
                    err) from err

    logger.debug("allocated 3 buffers of %d bytes", size)

    a, b, out = allocated
    return DeviceBuffers(a=a, b=b, out=out,
            element_count=element_count, dtype=dtype)

# }}}


# {{{ transfers

def check_host_array(name: str, ary: np.ndarray, buffers: DeviceBuffers) -> None:
    if ary.dtype != buffers.dtype:
        raise TransferFailed(
                f"host array '{name}' has dtype {ary.dtype}, "
                f"expected {buffers.dtype}")
    if ary.size != buffers.element_count:
        raise TransferFailed(
                f"host array '{name}' has {ary.size} elements, "
                f"expected {buffers.element_count}")
    if not ary.flags.c_contiguous:
        raise TransferFailed(f"host array '{name}' is not contiguous")


def upload_inputs(queue: cl.CommandQueue, buffers: DeviceBuffers,
        host_a: np.ndarray, host_b: np.ndarray) -> None:
    """Blocking host-to-device writes of *host_a*, then *host_b*."""
    for name, buf, ary in [("a", buffers.a, host_a), ("b", buffers.b, host_b)]:
        check_host_array(name, ary, buffers)
        if not ary.size:
            continue

        try:
            cl.enqueue_copy(queue, buf, ary, is_blocking=True)
        except cl.Error as err:
            raise TransferFailed.from_cl_error(
                    f"could not upload input '{name}'", err) from err

    logger.debug("uploaded 2 x %d bytes", buffers.nbytes)

# }}}


# {{{ kernel arguments

KERNEL_ARG_COUNT = 4


def bind_arguments(kernel: cl.Kernel, element_count: int,
        buffers: DeviceBuffers) -> None:
    """Bind ``(n, a, b, out)`` to the kernel's four positional slots."""
    try:
        num_args = kernel.num_args
    except cl.Error as err:
        raise ArgumentBindingFailed.from_cl_error(
                "could not query kernel arguments", err, slot_index=0) from err

    if num_args != KERNEL_ARG_COUNT:
        raise ArgumentBindingFailed(
                f"kernel takes {num_args} arguments, "
                f"expected {KERNEL_ARG_COUNT}",
                slot_index=min(num_args, KERNEL_ARG_COUNT))

    args = [np.int32(element_count), buffers.a, buffers.b, buffers.out]
    for i, arg in enumerate(args):
        try:
            kernel.set_arg(i, arg)
        except cl.Error as err:
            raise ArgumentBindingFailed.from_cl_error(
                    f"could not set kernel argument {i}", err,
                    slot_index=i) from err

    logger.debug("bound %d kernel arguments", len(args))

# }}}

# vim: foldmethod=marker
