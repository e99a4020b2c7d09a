"""Run one simulation end to end: normalize → node call → parse."""

from __future__ import annotations

import logging
import time

from sentinel.core.config import Settings, get_settings
from sentinel.core.errors import SimulationFailedError
from sentinel.core.networks import get_network_config
from sentinel.core.types import CallKind, SimulationRequest, SimulationResult
from sentinel.simulation.batch import BatchEvaluator, BatchSimulationRequest, BatchSimulationResult
from sentinel.simulation.client import NodeClient
from sentinel.simulation.normalizer import RequestNormalizer, function_id
from sentinel.simulation.parser import parse_simulation_response, parse_view_response

logger = logging.getLogger(__name__)

INVALID_AUTH_KEY_STATUS = "INVALID_AUTH_KEY"
INVALID_AUTH_KEY_MESSAGE = (
    "Entry function simulation requires a valid sender address. "
    "Use your connected wallet address or try a view function."
)


def attribute_abort(result: SimulationResult, request: SimulationRequest) -> None:
    """Name the called function when the abort landed in the called module."""
    location = result.error.location if result.error else None
    if location is None or location.function is not None:
        return
    if location.module.split("::")[-1] == request.module_name:
        location.function = request.function_name


class SimulationExecutor:
    """Simulate calls against the configured ledger nodes.

    The executor holds no per-request state; one instance (and its
    ``NodeClient``) can serve any number of concurrent requests.
    """

    def __init__(
        self,
        client: NodeClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.client = client or NodeClient(self.settings)
        self.normalizer = RequestNormalizer(self.client, self.settings)

    async def execute(self, request: SimulationRequest) -> SimulationResult:
        """Simulate one call.

        Raises:
            InvalidRequestError: malformed request
            TransportError: node unreachable or non-2xx
            ShapeError: simulate endpoint returned no result
            SimulationFailedError: the node rejected the placeholder identity
        """
        start = time.perf_counter()
        network = get_network_config(request.network, self.settings)
        fn = function_id(request)
        logger.info("Simulating %s on %s", fn, network.name, extra={"network": network.name})

        call = await self.normalizer.prepare(network.rpc_url, request)

        if call.kind == CallKind.VIEW:
            body = await self.client.view(network.rpc_url, call.body)
            result = parse_view_response(body)
        else:
            raw = await self.client.simulate(network.rpc_url, call.body, call.params)
            result = parse_simulation_response(raw)
            attribute_abort(result, request)
            if not result.success and INVALID_AUTH_KEY_STATUS in result.vm_status:
                logger.warning("Simulation of %s rejected: %s", fn, result.vm_status)
                raise SimulationFailedError(INVALID_AUTH_KEY_MESSAGE)

        logger.info(
            "Simulation completed: success=%s, gas_used=%d",
            result.success,
            result.gas_used,
            extra={
                "network": network.name,
                "function": fn,
                "gas_used": result.gas_used,
                "duration_ms": round((time.perf_counter() - start) * 1000, 1),
            },
        )
        return result

    async def execute_batch(self, batch: BatchSimulationRequest) -> BatchSimulationResult:
        """Run a scenario batch; see ``BatchEvaluator``."""
        return await BatchEvaluator(self).evaluate(batch)

    async def close(self) -> None:
        await self.client.close()
