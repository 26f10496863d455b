"""GPU utilization resolution from "GPU Engine" performance counters.

Two tiers:
    1. 3D engine instances only. Each instance is one process's share of the
       same engine, so the values are summed.
    2. Every engine instance. Engines run in parallel, so summing would over
       count; the busiest instance (maximum) is reported instead.
"""

import logging
from typing import List, Optional, Tuple

from vramprobe.formatter import format_percent
from vramprobe.models import (
    ENGINE_3D,
    ENGINE_MAX_ANY,
    ENGINE_UNAVAILABLE,
    UNAVAILABLE,
    Note,
    NoteSeverity,
    UtilizationStats,
    round_percent,
)
from vramprobe.sources.base import CounterSource, SourceError

logger = logging.getLogger(__name__)

ENGINE_3D_COUNTER = r"\GPU Engine(*engtype_3D)\Utilization Percentage"
ENGINE_ANY_COUNTER = r"\GPU Engine(*)\Utilization Percentage"

STAGE_UTILIZATION = "utilization"


def _sample_values(
    counters: CounterSource, counter_path: str, notes: List[Note]
) -> Optional[List[float]]:
    """Return the non-null cooked values for ``counter_path``, or None if there are none."""
    try:
        samples = counters.sample(counter_path)
    except SourceError as e:
        logger.warning(f"Utilization query failed for {counter_path}: {e}")
        notes.append(Note(STAGE_UTILIZATION, NoteSeverity.WARNING, str(e)))
        return None

    values = [s.cooked_value for s in samples if s.cooked_value is not None]
    logger.debug(f"{counter_path}: {len(values)}/{len(samples)} instance(s) with values")
    return values or None


def sample_utilization(counters: CounterSource) -> Tuple[Optional[int], str, List[Note]]:
    """Run the two-tier utilization lookup.

    Returns:
        (percent or None, engine category, notes)
    """
    notes: List[Note] = []

    values = _sample_values(counters, ENGINE_3D_COUNTER, notes)
    if values:
        return round_percent(sum(values)), ENGINE_3D, notes

    values = _sample_values(counters, ENGINE_ANY_COUNTER, notes)
    if values:
        return round_percent(max(values)), ENGINE_MAX_ANY, notes

    notes.append(
        Note(
            STAGE_UTILIZATION,
            NoteSeverity.WARNING,
            "No GPU engine utilization counters returned data (3D or any engine).",
        )
    )
    return None, ENGINE_UNAVAILABLE, notes


def resolve_utilization_stats(counters: CounterSource) -> UtilizationStats:
    """Resolve GPU utilization percentage and its engine category."""
    percent, category, notes = sample_utilization(counters)
    reading = UNAVAILABLE if percent is None else percent

    if percent is None:
        display = "GPU Load: N/A"
    else:
        display = f"GPU Load: {format_percent(reading)}% ({category})"

    return UtilizationStats(
        percent=reading,
        engine_category=category,
        display=display,
        notes=tuple(notes),
    )
