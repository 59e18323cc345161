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
import weakref

import numpy as np
import pytest

import pyopencl as cl
from pyopencl import _cl
from pyopencl.tools import (  # noqa: F401
    pytest_generate_tests_for_pyopencl as pytest_generate_tests)

import cloffload.pipeline as pipeline_mod
from cloffload.config import PipelineConfig
from cloffload.errors import (
    AllocationFailed, CompilationFailed, EntryPointNotFound, OffloadError,
    SourceFileNotFound, TransferFailed)
from cloffload.memory import DeviceBuffers
from cloffload.pipeline import Pipeline, run_vector_add


# {{{ end-to-end on a device

def test_eight_elements(device):
    a = np.array([1, 2, 3, 4, 5, 6, 7, 8], dtype=np.int32)
    b = np.array([8, 7, 6, 5, 4, 3, 2, 1], dtype=np.int32)

    with Pipeline(PipelineConfig(), device=device) as pipe:
        result = pipe.run(a, b)

    assert result.output.tolist() == [9]*8
    assert result.timing.wall_seconds >= 0


@pytest.mark.parametrize("size", [1, 17, 1000, 2**20 + 3])
def test_random_elements(device, size):
    rng = np.random.default_rng(seed=size)
    a = rng.integers(0, 100, size, dtype=np.int32)
    b = rng.integers(0, 100, size, dtype=np.int32)

    with Pipeline(PipelineConfig(), device=device) as pipe:
        result = pipe.run(a, b)

    assert np.array_equal(result.output, a + b)


def test_zero_elements(device):
    empty = np.zeros(0, dtype=np.int32)

    with Pipeline(PipelineConfig(), device=device) as pipe:
        result = pipe.run(empty, empty)

    assert result.output.shape == (0,)
    assert result.output.dtype == np.int32


def test_profiled_run(device):
    a = np.arange(4096, dtype=np.int32)

    with Pipeline(PipelineConfig(profiling=True), device=device) as pipe:
        result = pipe.run(a, a)

    assert np.array_equal(result.output, 2*a)
    assert result.timing.device_seconds is not None
    assert result.timing.device_seconds >= 0


def test_run_vector_add_converts_inputs(monkeypatch, platform):
    monkeypatch.setenv("CLOFFLOAD_PLATFORM", platform.name)

    result = run_vector_add([1, 2, 3], np.arange(3)[::-1])
    assert result.output.tolist() == [3, 3, 3]


def test_mismatched_inputs(device):
    with Pipeline(PipelineConfig(), device=device) as pipe:
        with pytest.raises(OffloadError):
            pipe.run(np.zeros(4, dtype=np.int32), np.zeros(5, dtype=np.int32))


def test_missing_source_allocates_nothing(monkeypatch, device, tmp_path):
    def no_allocation(*args, **kwargs):
        raise AssertionError("buffers allocated")

    monkeypatch.setattr(pipeline_mod, "allocate_buffers", no_allocation)
    config = PipelineConfig(source_path=str(tmp_path / "vector_ops_ocl.cl"))

    with pytest.raises(SourceFileNotFound):
        Pipeline(config, device=device)


def test_misspelled_entry_point_after_compile(device):
    config = PipelineConfig(kernel_name="vector_add_ocI")

    with pytest.raises(EntryPointNotFound):
        Pipeline(config, device=device)


def test_bad_source(device, tmp_path):
    src = tmp_path / "bad.cl"
    src.write_text("__kernel void vector_add_ocl(const int n) { n = ; }")

    with pytest.raises(CompilationFailed) as exc_info:
        Pipeline(PipelineConfig(source_path=str(src)), device=device)

    assert exc_info.value.log


def test_two_pipelines_in_one_process(device):
    a = np.arange(100, dtype=np.int32)

    for _ in range(2):
        pipe = Pipeline(PipelineConfig(), device=device)
        result = pipe.run(a, a)
        pipe.close()
        pipe.close()

        assert np.array_equal(result.output, 2*a)

# }}}


# {{{ teardown order, without a device

class _Handle:
    def __init__(self, name, log):
        self.name = name
        weakref.finalize(self, log.append, name)


class _Queue:
    def __init__(self, log):
        self.log = log
        self.fail_finish = False

    def finish(self):
        if self.fail_finish:
            raise cl.RuntimeError(_cl._ErrorRecord(
                msg="", code=cl.status_code.OUT_OF_RESOURCES,
                routine="clFinish"))
        self.log.append("finish")

    def _finalize(self):
        self.log.append("queue")


class _Buffer:
    def __init__(self, name, log):
        self.name = name
        self.log = log

    def release(self):
        self.log.append(self.name)


@pytest.fixture
def fake_stages(monkeypatch):
    log = []

    monkeypatch.setattr(pipeline_mod, "create_context",
            lambda device: _Handle("context", log))
    monkeypatch.setattr(pipeline_mod, "build_program",
            lambda context, device, path, options: _Handle("program", log))
    monkeypatch.setattr(pipeline_mod, "create_queue",
            lambda context, device, profiling=False: _Queue(log))
    monkeypatch.setattr(pipeline_mod, "resolve_kernel",
            lambda program, name: _Handle("kernel", log))

    return log


def test_teardown_order(fake_stages):
    log = fake_stages
    pipe = Pipeline(PipelineConfig(), device="fake device")
    pipe.buffers = DeviceBuffers(
            a=_Buffer("a", log), b=_Buffer("b", log), out=_Buffer("out", log),
            element_count=1)

    pipe.close()
    assert log == ["finish", "a", "b", "out",
            "kernel", "queue", "program", "context"]

    pipe.close()
    assert len(log) == 8

    with pytest.raises(RuntimeError):
        pipe.run(np.zeros(1), np.zeros(1))


def test_failed_setup_releases_earlier_stages(fake_stages, monkeypatch):
    log = fake_stages

    def resolve_kernel(program, name):
        del program
        raise EntryPointNotFound(f"kernel '{name}' not found", name=name)

    monkeypatch.setattr(pipeline_mod, "resolve_kernel", resolve_kernel)

    with pytest.raises(EntryPointNotFound):
        Pipeline(PipelineConfig(), device="fake device")

    assert log == ["finish", "queue", "program", "context"]


def test_teardown_survives_queue_errors(fake_stages, caplog):
    log = fake_stages
    pipe = Pipeline(PipelineConfig(), device="fake device")
    pipe.queue.fail_finish = True

    with caplog.at_level(logging.WARNING, logger="cloffload.pipeline"):
        pipe.close()

    assert log == ["kernel", "queue", "program", "context"]
    assert "finishing command queue failed" in caplog.text
    assert pipe.queue is None


@pytest.mark.parametrize("host_a", [
    np.array([1.7, 2.9]),
    np.array([2**31, 5], dtype=np.int64),
    np.array([-2**31 - 1, 0], dtype=np.int64),
    np.array([2**32, 1], dtype=np.uint64),
    ])
def test_lossy_inputs_are_rejected(fake_stages, monkeypatch, host_a):
    def no_allocation(*args, **kwargs):
        raise AssertionError("buffers allocated")

    monkeypatch.setattr(pipeline_mod, "allocate_buffers", no_allocation)

    with Pipeline(PipelineConfig(), device="fake device") as pipe:
        with pytest.raises(TransferFailed):
            pipe.run(host_a, np.zeros(2, dtype=np.int32))


@pytest.mark.parametrize("host_a", [
    [1, 2],
    np.array([2**31 - 1, -2**31], dtype=np.int64),
    np.array([7, 8], dtype=np.int16),
    np.array([True, False]),
    ])
def test_lossless_inputs_reach_allocation(fake_stages, monkeypatch, host_a):
    seen = []

    def allocate_buffers(context, element_count, dtype):
        seen.append((element_count, np.dtype(dtype)))
        raise AllocationFailed("stop here")

    monkeypatch.setattr(pipeline_mod, "allocate_buffers", allocate_buffers)

    with Pipeline(PipelineConfig(), device="fake device") as pipe:
        with pytest.raises(AllocationFailed):
            pipe.run(host_a, np.zeros(2, dtype=np.int64))

    assert seen == [(2, np.dtype(np.int32))]

# }}}


if __name__ == "__main__":
    import sys
    if len(sys.argv) > 1:
        exec(sys.argv[1])
    else:
        from pytest import main
        main([__file__])

# vim: foldmethod=marker
