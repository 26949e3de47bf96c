"""
sim package initializer.

This package contains the event-scheduling engine, primitives (event list,
stages), the tandem network transitions, variate streams, overflow policies
and metric extraction used by the tandem queueing-network simulator.
"""
__all__ = [
    "errors", "variates", "queues", "stations", "network",
    "policies", "metrics", "config", "simulation",
]
