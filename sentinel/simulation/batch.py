"""Regression-style scenario batches for CI pipelines.

Each scenario is simulated on its own and checked against its expectations.
Scenarios run one after another: aggregate gas and result order stay
deterministic and the node sees bounded traffic. A scenario that cannot be
simulated is recorded as failed; the batch itself never aborts.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from sentinel.core.errors import SentinelError
from sentinel.core.types import SimulationRequest, SimulationResult

if TYPE_CHECKING:
    from sentinel.simulation.executor import SimulationExecutor

logger = logging.getLogger(__name__)


# ── Schemas ──────────────────────────────────────────────────────────────────


class SimulationScenario(BaseModel):
    """One named call plus what the caller expects from it."""

    name: str
    sender: str = ""
    module_address: str
    module_name: str
    function_name: str
    type_args: list[str] = Field(default_factory=list)
    args: list[Any] = Field(default_factory=list)
    max_gas: int | None = None
    expect_success: bool | None = None
    expect_error: str | None = None


class BatchSimulationRequest(BaseModel):
    network: str = "testnet"
    scenarios: list[SimulationScenario] = Field(default_factory=list)


class ScenarioResult(BaseModel):
    name: str
    passed: bool
    gas_used: int = 0
    expected_success: bool | None = None
    actual_success: bool = False
    expected_error: str | None = None
    actual_error: str | None = None
    failure_reason: str | None = None


class BatchSimulationResult(BaseModel):
    total: int = 0
    passed: int = 0
    failed: int = 0
    results: list[ScenarioResult] = Field(default_factory=list)
    max_gas_used: int = 0
    summary: str = "0/0 scenarios passed"


# ── Evaluation ───────────────────────────────────────────────────────────────


def evaluate_scenario(scenario: SimulationScenario, result: SimulationResult) -> ScenarioResult:
    """Check one simulated result against the scenario's expectations."""
    passed = True
    failure_reason = None
    actual_error = result.error.message if result.error else None

    if scenario.expect_success is not None and result.success != scenario.expect_success:
        passed = False
        failure_reason = f"Expected success={scenario.expect_success}, got {result.success}"

    if scenario.expect_error is not None:
        if actual_error is None:
            passed = False
            failure_reason = f"Expected error '{scenario.expect_error}', but succeeded"
        elif scenario.expect_error not in actual_error:
            passed = False
            failure_reason = (
                f"Expected error containing '{scenario.expect_error}', got '{actual_error}'"
            )

    return ScenarioResult(
        name=scenario.name,
        passed=passed,
        gas_used=result.gas_used,
        expected_success=scenario.expect_success,
        actual_success=result.success,
        expected_error=scenario.expect_error,
        actual_error=actual_error,
        failure_reason=failure_reason,
    )


def failed_scenario(scenario: SimulationScenario, exc: Exception) -> ScenarioResult:
    """Record a scenario whose simulation could not be completed."""
    return ScenarioResult(
        name=scenario.name,
        passed=False,
        gas_used=0,
        expected_success=scenario.expect_success,
        actual_success=False,
        expected_error=scenario.expect_error,
        actual_error=str(exc),
        failure_reason=f"Simulation error: {exc}",
    )


def summarize(results: list[ScenarioResult]) -> BatchSimulationResult:
    """Aggregate scenario results, keeping their order."""
    total = len(results)
    passed = sum(1 for r in results if r.passed)
    return BatchSimulationResult(
        total=total,
        passed=passed,
        failed=total - passed,
        results=results,
        max_gas_used=max([0, *(r.gas_used for r in results)]),
        summary=f"{passed}/{total} scenarios passed",
    )


class BatchEvaluator:
    """Drive a scenario batch through a ``SimulationExecutor``."""

    def __init__(self, executor: SimulationExecutor) -> None:
        self._executor = executor

    def to_request(self, network: str, scenario: SimulationScenario) -> SimulationRequest:
        max_gas = scenario.max_gas
        if max_gas is None:
            max_gas = self._executor.settings.default_max_gas
        return SimulationRequest(
            network=network,
            sender=scenario.sender,
            module_address=scenario.module_address,
            module_name=scenario.module_name,
            function_name=scenario.function_name,
            type_args=scenario.type_args,
            args=scenario.args,
            max_gas=max_gas,
        )

    async def evaluate(self, batch: BatchSimulationRequest) -> BatchSimulationResult:
        logger.info(
            "Running batch simulation: %d scenarios on %s",
            len(batch.scenarios),
            batch.network,
            extra={"network": batch.network},
        )

        results: list[ScenarioResult] = []
        for scenario in batch.scenarios:
            try:
                sim = await self._executor.execute(self.to_request(batch.network, scenario))
            except SentinelError as exc:
                logger.warning(
                    "Scenario %r failed to simulate: %s",
                    scenario.name,
                    exc,
                    extra={"scenario": scenario.name},
                )
                results.append(failed_scenario(scenario, exc))
                continue
            results.append(evaluate_scenario(scenario, sim))

        outcome = summarize(results)
        logger.info(
            "Batch simulation completed: %s, max_gas=%d",
            outcome.summary,
            outcome.max_gas_used,
            extra={"network": batch.network, "gas_used": outcome.max_gas_used},
        )
        return outcome
