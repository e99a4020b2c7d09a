"""Decode raw node responses into ``SimulationResult``.

Tolerant on fields, strict on shape: any individual missing or malformed
field resolves to a default (0, "Unknown", empty list), while a missing or
empty top-level result array is a ``ShapeError``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from sentinel.core.errors import ErrorCode, ShapeError
from sentinel.core.types import (
    ChangeType,
    SimEvent,
    SimulationError,
    SimulationResult,
    SourceLocation,
    StateChange,
)

logger = logging.getLogger(__name__)

DEFAULT_VM_STATUS = "Unknown"

# View calls report no gas; charge a flat read cost
VIEW_FUNCTION_GAS = 100
VIEW_GAS_UNIT_PRICE = 100
VIEW_VM_STATUS = "Executed successfully"

# "Move abort in 0x1::coin: EINSUFFICIENT_BALANCE(0x10006): ..."
_ABORT_LOCATION = re.compile(r"Move abort in (0x[0-9a-fA-F]+)::(\w+)")


def _as_int(value: Any, default: int = 0) -> int:
    """Decimal string or non-negative int → int, else ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value >= 0 else default
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    return default


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def parse_state_changes(changes: Any) -> list[StateChange]:
    """Keep resource writes and deletes, in order; drop every other kind."""
    parsed: list[StateChange] = []
    for change in _as_list(changes):
        if not isinstance(change, dict):
            continue
        kind = change.get("type")
        address = change.get("address")
        if not isinstance(address, str):
            continue

        if kind == "write_resource":
            data = change.get("data")
            data = data if isinstance(data, dict) else {}
            resource = data.get("type")
            parsed.append(StateChange(
                address=address,
                resource=resource if isinstance(resource, str) else "unknown",
                change_type=ChangeType.WRITE,
                after=data.get("data"),
            ))
        elif kind == "delete_resource":
            resource = change.get("resource")
            if not isinstance(resource, str):
                continue
            parsed.append(StateChange(
                address=address,
                resource=resource,
                change_type=ChangeType.DELETE,
            ))
    return parsed


def parse_events(events: Any) -> list[SimEvent]:
    """Events in emission order; an event without a type is dropped."""
    parsed: list[SimEvent] = []
    for event in _as_list(events):
        if not isinstance(event, dict):
            continue
        event_type = event.get("type")
        if not isinstance(event_type, str):
            continue
        parsed.append(SimEvent(
            type=event_type,
            data=event.get("data"),
            sequence_number=_as_int(event.get("sequence_number")),
        ))
    return parsed


def abort_location(vm_status: str) -> SourceLocation | None:
    """Module a ``Move abort`` status points at, or None."""
    match = _ABORT_LOCATION.search(vm_status)
    if match is None:
        return None
    return SourceLocation(module=f"{match.group(1)}::{match.group(2)}")


def parse_transaction(entry: Mapping[str, Any]) -> SimulationResult:
    """Decode one simulated transaction object. Never raises."""
    success = entry.get("success") is True
    vm_status = entry.get("vm_status")
    vm_status = vm_status if isinstance(vm_status, str) else DEFAULT_VM_STATUS

    error = None
    if not success:
        error = SimulationError(
            code=ErrorCode.EXECUTION_FAILED.value,
            message=vm_status,
            location=abort_location(vm_status),
        )

    return SimulationResult(
        success=success,
        gas_used=_as_int(entry.get("gas_used")),
        gas_unit_price=_as_int(entry.get("gas_unit_price")),
        vm_status=vm_status,
        state_changes=parse_state_changes(entry.get("changes")),
        events=parse_events(entry.get("events")),
        error=error,
    )


def parse_simulation_response(payload: Any) -> SimulationResult:
    """Decode the body of ``/transactions/simulate``.

    Raises:
        ShapeError: the body is not a non-empty array of objects
    """
    if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
        logger.warning("Simulation response has no result array: %r", str(payload)[:200])
        raise ShapeError("Empty response from simulation")
    return parse_transaction(payload[0])


def parse_view_response(body: Any) -> SimulationResult:
    """Wrap the body of a successful ``/view`` call."""
    values = body if isinstance(body, list) else [body]
    return SimulationResult(
        success=True,
        gas_used=VIEW_FUNCTION_GAS,
        gas_unit_price=VIEW_GAS_UNIT_PRICE,
        vm_status=VIEW_VM_STATUS,
        return_values=values,
    )
