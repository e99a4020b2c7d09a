"""Sentinel: simulation-result analysis for Move ledger nodes."""

__version__ = "0.1.0"
