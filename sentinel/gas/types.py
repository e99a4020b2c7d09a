"""Gas profile schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class OperationGas(BaseModel):
    """Gas attributed to one operation category."""

    operation: str
    count: int
    total_gas: int
    percentage: float


class Hotspot(BaseModel):
    """Synthetic attribution of cost to an inferred location."""

    line: int | None = None
    gas: int
    operation: str


class FunctionGas(BaseModel):
    module_name: str
    function_name: str
    gas_used: int
    percentage: float
    hotspots: list[Hotspot] = Field(default_factory=list)


class GasSuggestion(BaseModel):
    """Optimization hint. Severity is one of info / warning / critical."""

    severity: str
    message: str
    location: str | None = None
    estimated_savings: int = 0


class GasStep(BaseModel):
    step: int
    gas: int
    cumulative: int
    operation: str


class GasProfile(BaseModel):
    """Complete gas analysis of one simulated call."""

    total_gas: int
    by_operation: list[OperationGas] = Field(default_factory=list)
    by_function: list[FunctionGas] = Field(default_factory=list)
    suggestions: list[GasSuggestion] = Field(default_factory=list)
    steps: list[GasStep] = Field(default_factory=list)
