"""Heuristic gas profiling of simulated calls."""

from sentinel.gas.profiler import GasAnalyzer, analyze_gas  # noqa: F401

__all__ = ["GasAnalyzer", "analyze_gas"]
