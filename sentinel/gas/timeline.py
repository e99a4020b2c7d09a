"""Step timeline for gas visualization.

The timeline is synthetic: fixed costs for entry, per-write and return steps
plus the category totals, rescaled afterwards so the running total lands on
the real ``gas_used``.
"""

from __future__ import annotations

from sentinel.core.naming import short_resource_name
from sentinel.core.types import SimulationResult
from sentinel.gas.types import GasStep, OperationGas

ENTRY_STEP_GAS = 100
WRITE_STEP_GAS = 100
RETURN_STEP_GAS = 10
MAX_WRITE_STEPS = 5

ENTRY_LABEL = "Function Entry"
RETURN_LABEL = "Function Return"


def write_label(resource: str) -> str:
    return f"Write: {short_resource_name(resource)}"


def rescale(value: int, total: int, cumulative: int) -> int:
    """``value * total / cumulative``, truncated.

    Integer arithmetic, so ``rescale(cumulative, total, cumulative) == total``.
    No-op when either side is zero.
    """
    if cumulative <= 0 or total <= 0:
        return value
    return value * total // cumulative


def create_timeline(result: SimulationResult, operations: list[OperationGas]) -> list[GasStep]:
    """Build the normalized gas step timeline (steps numbered from 1)."""
    planned: list[tuple[str, int]] = [(ENTRY_LABEL, ENTRY_STEP_GAS)]
    planned.extend((op.operation, op.total_gas) for op in operations if op.total_gas > 0)
    planned.extend(
        (write_label(change.resource), WRITE_STEP_GAS)
        for change in result.state_changes[:MAX_WRITE_STEPS]
    )
    planned.append((RETURN_LABEL, RETURN_STEP_GAS))

    cumulative = sum(gas for _, gas in planned)
    steps: list[GasStep] = []
    running = 0
    for idx, (label, gas) in enumerate(planned, start=1):
        running += gas
        steps.append(GasStep(
            step=idx,
            gas=rescale(gas, result.gas_used, cumulative),
            cumulative=rescale(running, result.gas_used, cumulative),
            operation=label,
        ))
    return steps
