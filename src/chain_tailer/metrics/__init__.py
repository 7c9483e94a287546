"""
Metrics module for observability.

Provides counters, gauges, and histograms for tracking reader behavior.
Exposes metrics in Prometheus text format.
"""

from .registry import (
    REGISTRY,
    block_fetch_time,
    blocks_committed,
    current_block_number,
    forks_detected,
    generate_metrics,
    head_block_number,
    history_exhausted,
    rollback_steps,
)

__all__ = [
    "REGISTRY",
    "block_fetch_time",
    "blocks_committed",
    "current_block_number",
    "forks_detected",
    "generate_metrics",
    "head_block_number",
    "history_exhausted",
    "rollback_steps",
]
