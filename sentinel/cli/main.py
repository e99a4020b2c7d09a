"""Sentinel CLI: simulate Move calls and analyse the results locally.

Usage:
    sentinel simulate --module <addr>::<name> --function <fn>   Simulate one call
    sentinel gas --module <addr>::<name> --function <fn>        Gas profile of one call
    sentinel trace --module <addr>::<name> --function <fn>      Synthetic execution trace
    sentinel batch <file>                                       Run a scenario batch
    sentinel config                                             Show current configuration

Examples:
    sentinel simulate --module 0x1::coin --function balance \\
        --type-arg 0x1::aptos_coin::AptosCoin --arg '"0x1"' --view
    sentinel gas --network mainnet --sender 0xabc --module 0x1::aptos_account \\
        --function transfer --arg '"0xdef"' --arg 1000 --format json
    sentinel batch scenarios.json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from sentinel import __version__
from sentinel.core.config import get_settings
from sentinel.core.errors import SentinelError
from sentinel.core.logging import setup_logging
from sentinel.core.networks import get_all_networks
from sentinel.core.types import SimulationRequest, SimulationResult
from sentinel.gas.profiler import GasAnalyzer
from sentinel.gas.types import GasProfile
from sentinel.simulation.batch import BatchSimulationRequest, BatchSimulationResult
from sentinel.simulation.executor import SimulationExecutor
from sentinel.trace.synthesizer import TraceExecutor
from sentinel.trace.types import TraceResult


# ── Coloured output helpers ──────────────────────────────────────────────────

_RESET = "\033[0m"
_BOLD = "\033[1m"
_RED = "\033[91m"
_YELLOW = "\033[93m"
_GREEN = "\033[92m"
_CYAN = "\033[96m"
_DIM = "\033[2m"

_SEVERITY_COLOR = {
    "warning": _YELLOW,
    "info": _CYAN,
}


def _c(text: str, code: str) -> str:
    return f"{code}{text}{_RESET}"


def _status(success: bool) -> str:
    return _c("SUCCESS", _GREEN + _BOLD) if success else _c("FAILED", _RED + _BOLD)


# ── CLI argument parser ─────────────────────────────────────────────────────


def _module_arg(value: str) -> tuple[str, str]:
    """Parse ``ADDR::NAME`` into its address and module name."""
    address, sep, name = value.partition("::")
    if not sep or not address or not name or "::" in name:
        raise argparse.ArgumentTypeError(f"expected ADDR::NAME, got '{value}'")
    return address, name


def _json_arg(value: str) -> Any:
    """Decode a JSON argument; bare words are passed through as strings."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def _add_call_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--network", "-n", default="testnet", help="Network name (default: testnet)")
    p.add_argument("--sender", "-s", default="", help="Sender address for entry functions")
    p.add_argument("--module", "-m", required=True, type=_module_arg, help="Module as ADDR::NAME")
    p.add_argument("--function", "-F", required=True, help="Function name")
    p.add_argument(
        "--type-arg",
        "-t",
        dest="type_args",
        action="append",
        default=[],
        help="Type argument (repeatable)",
    )
    p.add_argument(
        "--arg",
        "-a",
        dest="args",
        action="append",
        type=_json_arg,
        default=[],
        help="Function argument as JSON (repeatable)",
    )
    p.add_argument("--max-gas", type=int, default=None, help="Max gas amount")
    p.add_argument("--view", action="store_true", help="Call as a view function")
    _add_format_arg(p)


def _add_format_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--format",
        "-f",
        default="table",
        choices=["table", "json"],
        help="Output format (default: table)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sentinel",
        description="Sentinel: Move call simulation and analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument("--quiet", "-q", action="store_true", help="Minimal output")

    sub = parser.add_subparsers(dest="command")

    # ── simulate / gas / trace ───────────────────────────────────────────────
    _add_call_args(sub.add_parser("simulate", help="Simulate one call"))
    _add_call_args(sub.add_parser("gas", help="Profile the gas of one call"))
    _add_call_args(sub.add_parser("trace", help="Synthesize the execution trace of one call"))

    # ── batch ────────────────────────────────────────────────────────────────
    batch_p = sub.add_parser("batch", help="Run a JSON batch of scenarios")
    batch_p.add_argument("file", help="Path to the batch file")
    _add_format_arg(batch_p)

    # ── config ───────────────────────────────────────────────────────────────
    sub.add_parser("config", help="Show current configuration")

    return parser


def request_from_args(args: argparse.Namespace) -> SimulationRequest:
    address, module_name = args.module
    max_gas = args.max_gas if args.max_gas is not None else get_settings().default_max_gas
    return SimulationRequest(
        network=args.network,
        sender=args.sender,
        module_address=address,
        module_name=module_name,
        function_name=args.function,
        type_args=args.type_args,
        args=args.args,
        max_gas=max_gas,
        is_view=args.view,
    )


# ── Table output ─────────────────────────────────────────────────────────────


def _print_simulation(result: SimulationResult, quiet: bool = False) -> None:
    print(f"\n{_BOLD}Simulation{_RESET}  {_status(result.success)}")
    print(
        f"  Gas used: {_c(str(result.gas_used), _CYAN)}"
        f"  |  Unit price: {result.gas_unit_price}"
        f"  |  VM status: {result.vm_status}\n"
    )
    if result.error:
        print(_c(f"  {result.error.code}: {result.error.message}", _RED))
    if quiet:
        return

    if result.return_values:
        print(f"  {_BOLD}Return values{_RESET}")
        for i, value in enumerate(result.return_values):
            print(f"    {_DIM}{i:>3}.{_RESET} {json.dumps(value)}")
    if result.state_changes:
        print(f"  {_BOLD}State changes{_RESET}")
        for i, change in enumerate(result.state_changes, 1):
            print(f"    {_DIM}{i:>3}.{_RESET} {change.change_type.value:<6} {change.resource}")
            print(f"         {_DIM}{change.address}{_RESET}")
    if result.events:
        print(f"  {_BOLD}Events{_RESET}")
        for i, event in enumerate(result.events, 1):
            print(f"    {_DIM}{i:>3}.{_RESET} {event.type}  {_DIM}#{event.sequence_number}{_RESET}")
    print()


def _print_gas(profile: GasProfile, quiet: bool = False) -> None:
    print(f"\n{_BOLD}Gas profile{_RESET}  total: {_c(str(profile.total_gas), _CYAN)}\n")

    for op in profile.by_operation:
        print(f"  {op.operation:<16} {op.total_gas:>10}  {op.percentage:5.1f}%  {_DIM}x{op.count}{_RESET}")

    if not quiet and profile.by_function:
        print(f"\n  {_BOLD}Functions{_RESET}")
        for fn in profile.by_function:
            print(f"    {fn.module_name}::{fn.function_name:<24} {fn.gas_used:>10}  {fn.percentage:5.1f}%")
            for hotspot in fn.hotspots:
                line = f"L{hotspot.line}" if hotspot.line is not None else "  -"
                print(f"      {_DIM}{line:>5}{_RESET}  {hotspot.gas:>6}  {hotspot.operation}")

    if not quiet and profile.steps:
        print(f"\n  {_BOLD}Timeline{_RESET}")
        for step in profile.steps:
            print(f"    {_DIM}{step.step:>3}.{_RESET} {step.operation:<32} +{step.gas:<8} = {step.cumulative}")

    if profile.suggestions:
        print(f"\n  {_BOLD}Suggestions{_RESET}")
        for s in profile.suggestions:
            badge = _c(f" {s.severity.upper()} ", _SEVERITY_COLOR.get(s.severity, "") + _BOLD)
            savings = f"  {_DIM}~{s.estimated_savings} gas{_RESET}" if s.estimated_savings else ""
            print(f"    {badge} {s.message}{savings}")
    print()


def _print_trace(trace: TraceResult, quiet: bool = False) -> None:
    print(f"\n{_BOLD}Trace{_RESET}  {_status(trace.success)}  total gas: {_c(str(trace.total_gas), _CYAN)}")
    if trace.error:
        print(_c(f"  {trace.error}", _RED))
    print()

    for step in trace.steps:
        line = f"L{step.line_number}" if step.line_number is not None else "   "
        print(
            f"  {_DIM}{step.step_number:>3}.{_RESET} {step.instruction:<32} "
            f"{_DIM}{line:>5}{_RESET}  +{step.gas_delta:<8} = {step.gas_total}"
        )
        if quiet:
            continue
        for local in step.locals:
            value = json.dumps(local.value)
            if len(value) > 80:
                value = value[:80] + "…"
            print(f"       {_DIM}{local.name}: {local.var_type} = {value}{_RESET}")
    print()


def _print_batch(outcome: BatchSimulationResult, quiet: bool = False) -> None:
    colour = _GREEN if outcome.failed == 0 else _RED
    print(f"\n{_BOLD}Batch{_RESET}  {_c(outcome.summary, colour + _BOLD)}  max gas: {outcome.max_gas_used}\n")

    for r in outcome.results:
        mark = _c("✓", _GREEN) if r.passed else _c("✗", _RED)
        print(f"  {mark} {r.name:<32} gas: {r.gas_used}")
        if r.failure_reason and not quiet:
            print(f"      {_DIM}{r.failure_reason}{_RESET}")
    print()


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2))


# ── Commands ─────────────────────────────────────────────────────────────────


async def _run_call(args: argparse.Namespace) -> int:
    """Run simulate, gas or trace for one call and print the outcome."""
    try:
        request = request_from_args(args)
    except ValidationError as exc:
        print(_c(f"Error: invalid request: {exc}", _RED), file=sys.stderr)
        return 1

    executor = SimulationExecutor()
    try:
        if args.command == "gas":
            outcome: Any = await GasAnalyzer(executor).analyze(request)
            printer, success = _print_gas, True
        elif args.command == "trace":
            outcome = await TraceExecutor(executor).execute(request)
            printer, success = _print_trace, outcome.success
        else:
            outcome = await executor.execute(request)
            printer, success = _print_simulation, outcome.success
    except SentinelError as exc:
        print(_c(f"Error [{exc.code.value}]: {exc.message}", _RED), file=sys.stderr)
        return 1
    finally:
        await executor.close()

    if args.format == "json":
        _print_json(outcome.model_dump(mode="json"))
    else:
        printer(outcome, quiet=args.quiet)
    return 0 if success else 1


async def _run_batch(args: argparse.Namespace) -> int:
    """Run a batch file and print the verdicts."""
    path = Path(args.file)
    if not path.exists():
        print(_c(f"Error: batch file '{path}' does not exist.", _RED), file=sys.stderr)
        return 1
    try:
        text = path.read_text()
    except OSError as exc:
        print(_c(f"Error: cannot read batch file '{path}': {exc.strerror or exc}", _RED), file=sys.stderr)
        return 1
    try:
        batch = BatchSimulationRequest.model_validate_json(text)
    except ValidationError as exc:
        print(_c(f"Error: invalid batch file: {exc}", _RED), file=sys.stderr)
        return 1

    executor = SimulationExecutor()
    try:
        outcome = await executor.execute_batch(batch)
    finally:
        await executor.close()

    if args.format == "json":
        _print_json(outcome.model_dump(mode="json"))
    else:
        _print_batch(outcome, quiet=args.quiet)
    return 1 if outcome.failed else 0


def _run_config() -> int:
    """Print current settings (redacted) and known networks."""
    s = get_settings()
    print(f"\n{_BOLD}Sentinel Configuration{_RESET}\n")
    for field_name in sorted(type(s).model_fields.keys()):
        val = getattr(s, field_name, "")
        if any(kw in field_name for kw in ("password", "secret", "key", "token")):
            val = "****" if val else "(not set)"
        print(f"  {_DIM}{field_name}:{_RESET}  {val}")

    print(f"\n{_BOLD}Networks{_RESET}\n")
    for network in get_all_networks(s):
        tag = _c(" testnet", _DIM) if network.is_testnet else ""
        print(f"  {network.name:<10} {network.rpc_url}{tag}")
    print()
    return 0


# ── Entrypoint ───────────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"sentinel {__version__}")
        return 0

    if not args.command:
        parser.print_help()
        return 0

    settings = get_settings()
    setup_logging(settings.app_env, settings.log_level)

    if args.command == "config":
        return _run_config()

    if args.command in ("simulate", "gas", "trace"):
        return asyncio.run(_run_call(args))

    if args.command == "batch":
        return asyncio.run(_run_batch(args))

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
