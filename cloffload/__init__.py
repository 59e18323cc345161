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
from importlib import metadata

from cloffload.config import DEFAULT_KERNEL_NAME, PipelineConfig
from cloffload.device import describe_device, find_platform, select_device
from cloffload.dispatch import DispatchTiming, dispatch_and_wait, read_output
from cloffload.errors import (
    AllocationError, AllocationFailed, ArgumentBindingFailed, BuildError,
    CompilationFailed, ContextCreationFailed, ContextError, DeviceError,
    DispatchError, DispatchFailed, EntryPointNotFound, KernelCreationFailed,
    NoDeviceAvailable, OffloadError, QueueCreationFailed, ResolveError,
    SourceFileNotFound, TransferFailed)
from cloffload.memory import (
    DeviceBuffers, allocate_buffers, bind_arguments, upload_inputs)
from cloffload.pipeline import Pipeline, RunResult, run_vector_add
from cloffload.program import (
    build_program, create_context, create_queue, read_source, resolve_kernel)


__version__ = metadata.version("cloffload")

logger = logging.getLogger(__name__)


__all__ = [
    "DEFAULT_KERNEL_NAME",
    "AllocationError",
    "AllocationFailed",
    "ArgumentBindingFailed",
    "BuildError",
    "CompilationFailed",
    "ContextCreationFailed",
    "ContextError",
    "DeviceBuffers",
    "DeviceError",
    "DispatchError",
    "DispatchFailed",
    "DispatchTiming",
    "EntryPointNotFound",
    "KernelCreationFailed",
    "NoDeviceAvailable",
    "OffloadError",
    "Pipeline",
    "PipelineConfig",
    "QueueCreationFailed",
    "ResolveError",
    "RunResult",
    "SourceFileNotFound",
    "TransferFailed",
    "allocate_buffers",
    "bind_arguments",
    "build_program",
    "create_context",
    "create_queue",
    "describe_device",
    "dispatch_and_wait",
    "find_platform",
    "read_output",
    "read_source",
    "resolve_kernel",
    "run_vector_add",
    "select_device",
    "upload_inputs",
]
