"""Optimization suggestions derived from the category breakdown."""

from __future__ import annotations

from sentinel.gas.types import GasSuggestion, OperationGas

# ── Thresholds ───────────────────────────────────────────────────────────────

STORAGE_SHARE_THRESHOLD_PCT = 50
STORAGE_SAVINGS_PCT = 20
EVENT_COUNT_THRESHOLD = 5
EVENT_SAVINGS_PER_EXTRA = 100
HIGH_GAS_THRESHOLD = 50_000
LOW_GAS_THRESHOLD = 1_000

STORAGE_MESSAGE = (
    "Storage operations consume over 50% of gas. "
    "Consider batching writes or using more efficient data structures."
)
EVENTS_MESSAGE = (
    "Multiple events emitted. "
    "Consider consolidating events if consumers don't need granular updates."
)
HIGH_GAS_MESSAGE = "Transaction uses significant gas. Review if all operations are necessary."
EFFICIENT_MESSAGE = "Transaction is already gas-efficient. No significant optimizations available."


def generate_suggestions(total_gas: int, operations: list[OperationGas]) -> list[GasSuggestion]:
    """Apply every matching rule, in a fixed order.

    The "already efficient" note only fires when nothing else did.
    """
    suggestions: list[GasSuggestion] = []

    storage_gas = sum(op.total_gas for op in operations if "Storage" in op.operation)
    if storage_gas > total_gas * STORAGE_SHARE_THRESHOLD_PCT // 100:
        suggestions.append(GasSuggestion(
            severity="warning",
            message=STORAGE_MESSAGE,
            estimated_savings=storage_gas * STORAGE_SAVINGS_PCT // 100,
        ))

    event_op = next((op for op in operations if "Event" in op.operation), None)
    if event_op is not None and event_op.count > EVENT_COUNT_THRESHOLD:
        suggestions.append(GasSuggestion(
            severity="info",
            message=EVENTS_MESSAGE,
            estimated_savings=(event_op.count - EVENT_COUNT_THRESHOLD) * EVENT_SAVINGS_PER_EXTRA,
        ))

    if total_gas > HIGH_GAS_THRESHOLD:
        suggestions.append(GasSuggestion(severity="info", message=HIGH_GAS_MESSAGE))

    if not suggestions and total_gas < LOW_GAS_THRESHOLD:
        suggestions.append(GasSuggestion(severity="info", message=EFFICIENT_MESSAGE))

    return suggestions
