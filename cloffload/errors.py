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

import pyopencl as cl


class OffloadError(Exception):
    """Base class for all failures of the dispatch pipeline.

    .. attribute:: stage

        Human-readable name of the pipeline stage that failed.

    .. attribute:: code

        The OpenCL status code reported by the driver, or *None* if the
        failure did not originate in the driver.
    """

    stage = "pipeline"

    def __init__(self, msg: str, code: int | None = None) -> None:
        super().__init__(msg)
        self.code = code

    @classmethod
    def from_cl_error(cls, msg: str, err: cl.Error, **kwargs):
        """Wrap a :class:`pyopencl.Error`, keeping its status code."""
        return cls(f"{msg}: {err}", code=err.code, **kwargs)

    def __str__(self) -> str:
        msg = super().__str__()
        if self.code is not None:
            msg = f"{msg} (error code {self.code})"
        return msg


# {{{ device selection

class DeviceError(OffloadError):
    stage = "device selection"


class NoDeviceAvailable(DeviceError):
    pass

# }}}


# {{{ context and queue

class ContextError(OffloadError):
    stage = "context creation"


class ContextCreationFailed(ContextError):
    pass


class QueueCreationFailed(ContextError):
    stage = "command queue creation"

# }}}


# {{{ program build

class BuildError(OffloadError):
    stage = "program build"


class SourceFileNotFound(BuildError):
    def __init__(self, msg: str, path: str | None = None) -> None:
        super().__init__(msg)
        self.path = path


class CompilationFailed(BuildError):
    """The kernel compiler rejected the source.

    .. attribute:: log

        The compiler's build log. Never empty.
    """

    def __init__(self, msg: str, log: str, code: int | None = None) -> None:
        super().__init__(msg, code=code)
        self.log = log

# }}}


# {{{ kernel resolution

class ResolveError(OffloadError):
    stage = "kernel creation"


class EntryPointNotFound(ResolveError):
    def __init__(self, msg: str, name: str | None = None,
            code: int | None = None) -> None:
        super().__init__(msg, code=code)
        self.name = name


class KernelCreationFailed(ResolveError):
    pass

# }}}


# {{{ memory

class AllocationError(OffloadError):
    stage = "buffer allocation"


class AllocationFailed(AllocationError):
    pass


class TransferFailed(OffloadError):
    stage = "buffer transfer"


class ArgumentBindingFailed(OffloadError):
    stage = "kernel argument binding"

    def __init__(self, msg: str, slot_index: int,
            code: int | None = None) -> None:
        super().__init__(msg, code=code)
        self.slot_index = slot_index

# }}}


# {{{ dispatch

class DispatchError(OffloadError):
    stage = "kernel dispatch"


class DispatchFailed(DispatchError):
    pass

# }}}

# vim: foldmethod=marker
