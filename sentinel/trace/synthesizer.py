"""Trace synthesizer: linearize a simulation into debugger steps.

The node does not expose per-instruction execution, so the trace is rebuilt
from what it does report:

    Function Entry      args as typed locals
    <category> ...      one step per non-empty gas category
    Write: <Resource>   first few state changes, with address and payload
    Function Return

Step costs are synthetic; they are rescaled at the end so the running total
matches ``gas_used``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from sentinel.core.types import SimEvent, SimulationRequest, SimulationResult, StateChange
from sentinel.gas.profiler import EVENT_LABEL, HOTSPOT_LINE_STRIDE, analyze_operations
from sentinel.gas.timeline import (
    ENTRY_LABEL,
    ENTRY_STEP_GAS,
    MAX_WRITE_STEPS,
    RETURN_LABEL,
    RETURN_STEP_GAS,
    WRITE_STEP_GAS,
    rescale,
    write_label,
)
from sentinel.simulation.executor import SimulationExecutor
from sentinel.trace.types import ExecutionStep, LocalVariable, StackFrame, TraceResult

logger = logging.getLogger(__name__)

U64_MAX = 2**64 - 1
ENTRY_LINE = 1


# ── Locals ───────────────────────────────────────────────────────────────────


def infer_type(value: Any) -> str:
    """Best-guess Move type of a JSON argument."""
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, str):
        if value.startswith("0x"):
            return "address"
        if value.isascii() and value.isdigit() and int(value) <= U64_MAX:
            return "u64"
        return "string"
    if isinstance(value, int):
        return "u64" if 0 <= value <= U64_MAX else "i64"
    if isinstance(value, float):
        return "i64"
    if isinstance(value, list):
        return "vector"
    if isinstance(value, dict):
        return "struct"
    if value is None:
        return "null"
    return "unknown"


def args_as_locals(args: list[Any]) -> list[LocalVariable]:
    return [
        LocalVariable(name=f"arg{i}", var_type=infer_type(arg), value=arg)
        for i, arg in enumerate(args)
    ]


def change_locals(change: StateChange) -> list[LocalVariable]:
    locals_ = [LocalVariable(name="address", var_type="address", value=change.address)]
    if change.after is not None:
        locals_.append(LocalVariable(name="data", var_type="struct", value=change.after))
    return locals_


def event_locals(events: list[SimEvent]) -> list[LocalVariable]:
    locals_: list[LocalVariable] = []
    for i, event in enumerate(events):
        if event.data is not None:
            locals_.append(LocalVariable(name=f"event_data[{i}]", var_type="struct", value=event.data))
        locals_.append(LocalVariable(
            name=f"sequence_number[{i}]", var_type="u64", value=str(event.sequence_number),
        ))
    return locals_


# ── Trace construction ───────────────────────────────────────────────────────


@dataclass
class _PlannedStep:
    instruction: str
    gas: int
    line: int | None = None
    locals: list[LocalVariable] = field(default_factory=list)
    in_frame: bool = True


def _plan(result: SimulationResult, request: SimulationRequest) -> list[_PlannedStep]:
    planned = [_PlannedStep(
        instruction=ENTRY_LABEL,
        gas=ENTRY_STEP_GAS,
        line=ENTRY_LINE,
        locals=args_as_locals(request.args),
    )]

    for op in analyze_operations(result):
        if op.total_gas <= 0:
            continue
        planned.append(_PlannedStep(
            instruction=op.operation,
            gas=op.total_gas,
            locals=event_locals(result.events) if op.operation == EVENT_LABEL else [],
        ))

    for idx, change in enumerate(result.state_changes[:MAX_WRITE_STEPS]):
        planned.append(_PlannedStep(
            instruction=write_label(change.resource),
            gas=WRITE_STEP_GAS,
            line=(idx + 1) * HOTSPOT_LINE_STRIDE,
            locals=change_locals(change),
        ))

    planned.append(_PlannedStep(instruction=RETURN_LABEL, gas=RETURN_STEP_GAS, in_frame=False))
    return planned


def build_trace(result: SimulationResult, request: SimulationRequest) -> TraceResult:
    """Synthesize the execution trace of one simulated call. Pure."""
    planned = _plan(result, request)
    cumulative = sum(p.gas for p in planned)
    frame = StackFrame(module_name=request.module_name, function_name=request.function_name)

    steps: list[ExecutionStep] = []
    running = 0
    for number, p in enumerate(planned):
        running += p.gas
        steps.append(ExecutionStep(
            step_number=number,
            instruction=p.instruction,
            module_name=request.module_name,
            function_name=request.function_name,
            line_number=p.line,
            gas_delta=rescale(p.gas, result.gas_used, cumulative),
            gas_total=rescale(running, result.gas_used, cumulative),
            stack=[frame.model_copy()] if p.in_frame else [],
            locals=p.locals,
        ))

    return TraceResult(
        success=result.success,
        steps=steps,
        total_gas=result.gas_used,
        error=None if result.success else result.vm_status,
    )


class TraceExecutor:
    """Simulate a call and synthesize its trace."""

    def __init__(self, executor: SimulationExecutor) -> None:
        self._executor = executor

    async def execute(self, request: SimulationRequest) -> TraceResult:
        start = time.perf_counter()
        result = await self._executor.execute(request)
        trace = build_trace(result, request)

        logger.info(
            "Trace completed: success=%s, steps=%d, total_gas=%d (%.1fms)",
            trace.success,
            len(trace.steps),
            trace.total_gas,
            (time.perf_counter() - start) * 1000,
            extra={"network": request.network, "gas_used": trace.total_gas},
        )
        return trace
