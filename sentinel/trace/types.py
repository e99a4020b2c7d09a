"""Execution trace schemas consumed by the step debugger."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class StackFrame(BaseModel):
    module_name: str
    function_name: str
    depth: int = 0


class LocalVariable(BaseModel):
    name: str
    var_type: str
    value: Any = None


class ExecutionStep(BaseModel):
    """One synthetic instruction in the linearized trace."""

    step_number: int
    instruction: str
    module_name: str
    function_name: str
    line_number: int | None = None
    gas_delta: int
    gas_total: int
    stack: list[StackFrame] = Field(default_factory=list)
    locals: list[LocalVariable] = Field(default_factory=list)


class TraceResult(BaseModel):
    success: bool
    steps: list[ExecutionStep] = Field(default_factory=list)
    total_gas: int
    error: str | None = None
