"""Single-snapshot orchestration of memory and utilization resolution."""

import logging
from typing import Optional

from vramprobe.memory import resolve_memory_stats
from vramprobe.models import (
    ENGINE_UNAVAILABLE,
    MemoryStats,
    Note,
    NoteSeverity,
    ProbeResult,
    UtilizationStats,
)
from vramprobe.sources.base import AdapterRegistry, CounterSource
from vramprobe.utilization import resolve_utilization_stats

logger = logging.getLogger(__name__)


def collect_snapshot(
    registry: Optional[AdapterRegistry] = None,
    counters: Optional[CounterSource] = None,
) -> ProbeResult:
    """Take one snapshot of VRAM usage, capacity and utilization.

    Each resolution routine is isolated: an unexpected error in one becomes a
    HIGH note with unavailable fields, and the other still runs.

    Args:
        registry: Adapter registry provider (default: host provider)
        counters: Performance counter provider (default: host provider)
    """
    if registry is None or counters is None:
        from vramprobe.sources import create_sources

        default_registry, default_counters = create_sources()
        registry = registry or default_registry
        counters = counters or default_counters

    try:
        memory = resolve_memory_stats(registry, counters)
    except Exception as e:
        logger.error(f"Memory resolution failed: {e}", exc_info=True)
        memory = MemoryStats(
            display="VRAM: N/A",
            notes=(Note("memory", NoteSeverity.HIGH, f"Unexpected error: {e}"),),
        )

    try:
        utilization = resolve_utilization_stats(counters)
    except Exception as e:
        logger.error(f"Utilization resolution failed: {e}", exc_info=True)
        utilization = UtilizationStats(
            engine_category=ENGINE_UNAVAILABLE,
            display="GPU Load: N/A",
            notes=(Note("utilization", NoteSeverity.HIGH, f"Unexpected error: {e}"),),
        )

    return ProbeResult(memory=memory, utilization=utilization)
