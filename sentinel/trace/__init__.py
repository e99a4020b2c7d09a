"""Synthetic execution traces for the step debugger."""

from sentinel.trace.synthesizer import TraceExecutor, build_trace  # noqa: F401

__all__ = ["TraceExecutor", "build_trace"]
