"""Concurrency and error-handling building blocks: aggregator, sharded map, error propagation."""

__version__ = "0.1.0"
__all__ = ["aggregator", "propagator", "sharded_map"]