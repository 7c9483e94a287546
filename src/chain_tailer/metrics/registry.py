"""
Metric registry using prometheus_client.

Provides pre-defined metrics for a block reader.
Exposes metrics in Prometheus text format for scraping by the embedding process.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Create a dedicated registry for reader metrics.
#
# Using a dedicated registry avoids pollution from default Python process metrics.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Stream Position
# -----------------------------------------------------------------------------

head_block_number = Gauge(
    "chain_tailer_head_block_number",
    "Last known head block number reported by the adapter",
    registry=REGISTRY,
)

current_block_number = Gauge(
    "chain_tailer_current_block_number",
    "Number of the most recently committed block",
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Block Processing
# -----------------------------------------------------------------------------

blocks_committed = Counter(
    "chain_tailer_blocks_committed_total",
    "Total blocks committed in forward advance",
    registry=REGISTRY,
)

block_fetch_time = Histogram(
    "chain_tailer_block_fetch_seconds",
    "Duration of adapter block fetches",
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Fork Handling
# -----------------------------------------------------------------------------

forks_detected = Counter(
    "chain_tailer_forks_detected_total",
    "Forks detected by hash mismatch",
    registry=REGISTRY,
)

rollback_steps = Counter(
    "chain_tailer_rollback_steps_total",
    "Blocks walked back during fork resolution",
    registry=REGISTRY,
)

history_exhausted = Counter(
    "chain_tailer_history_exhausted_total",
    "Fork resolutions that ran out of history",
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(REGISTRY)
