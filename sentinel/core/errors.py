"""Error taxonomy for the Sentinel engine.

Every error carries a stable code and the HTTP status a surrounding handler
should answer with, so callers can render a consistent envelope:

    {
        "error": {
            "code": "RPC_ERROR",
            "message": "Human-readable description"
        }
    }

Missing or malformed fields inside an otherwise well-shaped node response are
never errors; the parser resolves them to defaults.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard error codes returned in the error envelope."""

    BAD_REQUEST = "BAD_REQUEST"
    RPC_ERROR = "RPC_ERROR"
    EMPTY_RESPONSE = "EMPTY_RESPONSE"
    SIMULATION_FAILED = "SIMULATION_FAILED"

    # Carried on SimulationResult.error, not raised
    EXECUTION_FAILED = "EXECUTION_FAILED"


class SentinelError(Exception):
    """Base class for errors raised by the engine."""

    code: ErrorCode = ErrorCode.SIMULATION_FAILED
    status_code: int = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": {"code": self.code.value, "message": self.message}}


class InvalidRequestError(SentinelError):
    """Malformed user input (e.g. empty module or function name)."""

    code = ErrorCode.BAD_REQUEST
    status_code = 400


class TransportError(SentinelError):
    """The ledger node was unreachable or answered with a non-2xx status."""

    code = ErrorCode.RPC_ERROR
    status_code = 502

    def __init__(
        self,
        message: str,
        response_text: str = "",
        node_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.response_text = response_text
        self.node_status = node_status


class ShapeError(SentinelError):
    """The node answered, but not with the top-level shape we require."""

    code = ErrorCode.EMPTY_RESPONSE
    status_code = 502


class SimulationFailedError(SentinelError):
    """The node reported a failure that leaves nothing useful to analyse."""

    code = ErrorCode.SIMULATION_FAILED
    status_code = 400
