"""Gas profiler: heuristic decomposition of a flat gas total.

The node only reports ``gas_used`` for a simulated call. This module splits
that scalar into categories, attributes it to functions, and emits ranked
optimization hints:

  ┌───────────────────────────────────────────────────────────────┐
  │                    GAS  PROFILER                              │
  │                                                               │
  │  ┌──────────┐   ┌────────────┐   ┌─────────────┐              │
  │  │Category  │──►│Function    │──►│Suggestion   │              │
  │  │Breakdown │   │Attribution │   │Rules        │              │
  │  └──────────┘   └────────────┘   └─────────────┘              │
  │       │                                                       │
  │       ▼                                                       │
  │  ┌──────────┐                                                 │
  │  │Step      │  entry → categories → writes → return,          │
  │  │Timeline  │  rescaled to gas_used                           │
  │  └──────────┘                                                 │
  └───────────────────────────────────────────────────────────────┘

All costs are synthetic estimates, not per-instruction measurements. The
constants below are heuristic but must stay as they are: downstream reports
compare profiles across runs.
"""

from __future__ import annotations

import logging
import time

from sentinel.core.naming import module_of_type
from sentinel.core.types import SimulationRequest, SimulationResult
from sentinel.gas.suggestions import generate_suggestions
from sentinel.gas.timeline import create_timeline
from sentinel.gas.types import FunctionGas, GasProfile, Hotspot, OperationGas
from sentinel.simulation.executor import SimulationExecutor

logger = logging.getLogger(__name__)


# ── Constants ────────────────────────────────────────────────────────────────

STORAGE_WRITE_GAS = 1000     # per state change
EVENT_EMISSION_GAS = 200     # per event
STORAGE_CAP_DIVISOR = 2      # storage never exceeds half of the total
EVENT_CAP_DIVISOR = 4        # events never exceed a quarter of the total
COMPUTATION_SHARE_PCT = 60   # of what remains after storage and events
CALL_SHARE_PCT = 40
CALLED_FUNCTION_SHARE_PCT = 5
HOTSPOT_LINE_STRIDE = 10

STORAGE_LABEL = "Storage Write"
EVENT_LABEL = "Event Emission"
COMPUTATION_LABEL = "Computation"
CALL_LABEL = "Function Calls"


def _percentage(gas: int, total: int) -> float:
    return gas / total * 100


# ── Category breakdown ───────────────────────────────────────────────────────


def analyze_operations(result: SimulationResult) -> list[OperationGas]:
    """Split the total into storage, event, computation and call categories.

    Sorted by gas, descending; ties keep insertion order.
    """
    total = max(result.gas_used, 1)
    operations: list[OperationGas] = []

    write_count = len(result.state_changes)
    storage_gas = min(write_count * STORAGE_WRITE_GAS, total // STORAGE_CAP_DIVISOR)
    if write_count > 0:
        operations.append(OperationGas(
            operation=STORAGE_LABEL,
            count=write_count,
            total_gas=storage_gas,
            percentage=_percentage(storage_gas, total),
        ))

    event_count = len(result.events)
    event_gas = min(event_count * EVENT_EMISSION_GAS, total // EVENT_CAP_DIVISOR)
    if event_count > 0:
        operations.append(OperationGas(
            operation=EVENT_LABEL,
            count=event_count,
            total_gas=event_gas,
            percentage=_percentage(event_gas, total),
        ))

    remaining = max(total - storage_gas - event_gas, 0)
    if remaining > 0:
        computation_gas = remaining * COMPUTATION_SHARE_PCT // 100
        call_gas = remaining * CALL_SHARE_PCT // 100
        operations.append(OperationGas(
            operation=COMPUTATION_LABEL,
            count=1,
            total_gas=computation_gas,
            percentage=_percentage(computation_gas, total),
        ))
        operations.append(OperationGas(
            operation=CALL_LABEL,
            count=1,
            total_gas=call_gas,
            percentage=_percentage(call_gas, total),
        ))

    operations.sort(key=lambda op: -op.total_gas)
    return operations


# ── Function attribution ─────────────────────────────────────────────────────


def identify_hotspots(result: SimulationResult) -> list[Hotspot]:
    """One hotspot per state change (synthetic line), then one per event."""
    hotspots = [
        Hotspot(
            line=(idx + 1) * HOTSPOT_LINE_STRIDE,
            gas=STORAGE_WRITE_GAS,
            operation=f"Storage write to {change.resource}",
        )
        for idx, change in enumerate(result.state_changes)
    ]
    hotspots.extend(
        Hotspot(gas=EVENT_EMISSION_GAS, operation=f"Emit event {event.type}")
        for event in result.events
    )
    return hotspots


def analyze_functions(result: SimulationResult, request: SimulationRequest) -> list[FunctionGas]:
    """Attribute gas to the called function and to modules inferred from events."""
    total = max(result.gas_used, 1)

    functions = [FunctionGas(
        module_name=request.module_name,
        function_name=request.function_name,
        gas_used=total,
        percentage=100.0,
        hotspots=identify_hotspots(result),
    )]

    for event in result.events:
        module = module_of_type(event.type)
        if module is None or module == request.module_name:
            continue
        estimated = total * CALLED_FUNCTION_SHARE_PCT // 100
        functions.append(FunctionGas(
            module_name=module,
            function_name="emit",
            gas_used=estimated,
            percentage=_percentage(estimated, total),
        ))

    return functions


def analyze_gas(result: SimulationResult, request: SimulationRequest) -> GasProfile:
    """Derive the full gas profile of one simulated call. Pure."""
    by_operation = analyze_operations(result)
    return GasProfile(
        total_gas=result.gas_used,
        by_operation=by_operation,
        by_function=analyze_functions(result, request),
        suggestions=generate_suggestions(result.gas_used, by_operation),
        steps=create_timeline(result, by_operation),
    )


# ── Analyzer ─────────────────────────────────────────────────────────────────


class GasAnalyzer:
    """Simulate a call and profile its gas.

    Usage:
        analyzer = GasAnalyzer(executor)
        profile = await analyzer.analyze(SimulationRequest(...))
    """

    def __init__(self, executor: SimulationExecutor) -> None:
        self._executor = executor

    async def analyze(self, request: SimulationRequest) -> GasProfile:
        start = time.perf_counter()
        result = await self._executor.execute(request)
        profile = analyze_gas(result, request)

        logger.info(
            "Gas analysis completed: total_gas=%d, suggestions=%d (%.1fms)",
            profile.total_gas,
            len(profile.suggestions),
            (time.perf_counter() - start) * 1000,
            extra={"network": request.network, "gas_used": profile.total_gas},
        )
        return profile
