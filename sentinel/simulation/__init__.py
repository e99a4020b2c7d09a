"""Simulation pipeline: normalize a call, run it on a node, parse the result.

Provides the node client, request normalization, response parsing, the
single-call executor and regression-style scenario batches.
"""
