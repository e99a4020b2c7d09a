"""Shared enums and types used across the engine."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, Field


# ── Enums ────────────────────────────────────────────────────────────────────


class ChangeType(str, enum.Enum):
    """Kind of storage mutation in a write-set."""

    WRITE = "write"
    DELETE = "delete"
    CREATE = "create"


class CallKind(str, enum.Enum):
    """Which node endpoint a prepared call targets."""

    VIEW = "view"
    ENTRY = "entry"


# ── Requests ─────────────────────────────────────────────────────────────────


class SimulationRequest(BaseModel):
    """A single Move function call to simulate."""

    network: str = "testnet"
    sender: str = ""
    module_address: str
    module_name: str
    function_name: str
    type_args: list[str] = Field(default_factory=list)
    args: list[Any] = Field(default_factory=list)
    max_gas: int = 100_000
    # Route to /view (no signature) instead of /transactions/simulate
    is_view: bool = False


class PreparedCall(BaseModel):
    """A fully formed, unsigned node call produced by the normalizer."""

    kind: CallKind
    path: str
    params: dict[str, str] = Field(default_factory=dict)
    body: dict[str, Any]


# ── Results ──────────────────────────────────────────────────────────────────


class StateChange(BaseModel):
    """One storage mutation, in the order the node reported it."""

    address: str
    resource: str
    change_type: ChangeType
    before: Any | None = None
    after: Any | None = None


class SimEvent(BaseModel):
    """An emitted event."""

    type: str
    data: Any | None = None
    sequence_number: int = 0


class SourceLocation(BaseModel):
    """Where a failed call aborted, as far as the VM status reveals it."""

    module: str
    function: str | None = None
    line: int | None = None


class SimulationError(BaseModel):
    """Structured error attached to a failed simulation."""

    code: str
    message: str
    location: SourceLocation | None = None


class SimulationResult(BaseModel):
    """Canonical outcome of simulating one call."""

    success: bool = False
    gas_used: int = 0
    gas_unit_price: int = 0
    vm_status: str = "Unknown"
    state_changes: list[StateChange] = Field(default_factory=list)
    events: list[SimEvent] = Field(default_factory=list)
    error: SimulationError | None = None
    # Only populated for view calls
    return_values: list[Any] | None = None
