"""VRAM capacity and usage resolution.

Capacity comes from the display-adapter class registry: every instance subkey
(0000, 0001, ...) with a DriverDesc and a positive
HardwareInformation.qwMemorySize is a candidate, and the largest one is taken as
the discrete GPU. Usage comes from the "GPU Process Memory" performance
counters, summed across instances.

The two sources are independent, so usage can exceed capacity when processes
are double counted or the counters cover a different adapter. That case is
flagged with a HIGH note but does not change the reported numbers.
"""

import logging
import re
from typing import Any, List, Optional, Sequence, Tuple

from vramprobe.formatter import format_gb
from vramprobe.models import (
    UNAVAILABLE,
    AdapterCandidate,
    GBReading,
    MemoryStats,
    Note,
    NoteSeverity,
    bytes_to_gb,
    is_available,
)
from vramprobe.sources.base import AdapterRegistry, CounterSource, SourceError

logger = logging.getLogger(__name__)

DEDICATED_USAGE_COUNTER = r"\GPU Process Memory(*)\Dedicated Usage"

ADAPTER_KEY_PATTERN = re.compile(r"^\d{4}$")

STAGE_REGISTRY = "adapter registry"
STAGE_USAGE = "memory usage"
STAGE_CONSISTENCY = "consistency"


def parse_memory_size(raw: Any) -> Optional[int]:
    """Parse a HardwareInformation.qwMemorySize value into a byte count.

    Drivers store it as REG_QWORD (int), as REG_BINARY (little-endian bytes,
    8 or 4 wide), or occasionally as a decimal string.

    Returns:
        The byte count, or None if the value cannot be interpreted
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        if len(raw) >= 8:
            return int.from_bytes(bytes(raw[:8]), "little", signed=False)
        if len(raw) == 4:
            return int.from_bytes(bytes(raw), "little", signed=False)
        return None
    if isinstance(raw, str):
        text = raw.strip()
        if text.isdigit():
            return int(text)
    return None


def scan_adapters(registry: AdapterRegistry) -> Tuple[List[AdapterCandidate], List[Note]]:
    """Collect adapter candidates from the display-adapter class registry.

    Returns:
        (candidates in enumeration order, notes)
    """
    notes: List[Note] = []
    try:
        entries = registry.list_adapter_entries()
    except SourceError as e:
        logger.warning(f"Adapter registry scan failed: {e}")
        notes.append(Note(STAGE_REGISTRY, NoteSeverity.WARNING, str(e)))
        return [], notes

    adapter_entries = [e for e in entries if ADAPTER_KEY_PATTERN.match(e.key_name)]
    if not adapter_entries:
        notes.append(
            Note(STAGE_REGISTRY, NoteSeverity.WARNING, "No display adapter entries found in registry.")
        )
        return [], notes

    candidates: List[AdapterCandidate] = []
    for entry in adapter_entries:
        description = (entry.description or "").strip()
        if not description:
            logger.debug(f"Adapter {entry.key_name} has no description, skipping")
            continue

        capacity = parse_memory_size(entry.memory_size)
        if capacity is None or capacity <= 0:
            logger.debug(
                f"Adapter {entry.key_name} ({description}) has no usable memory size: "
                f"{entry.memory_size!r}"
            )
            continue

        candidates.append(
            AdapterCandidate(capacity_bytes=capacity, description=description, key_name=entry.key_name)
        )

    if not candidates:
        notes.append(
            Note(
                STAGE_REGISTRY,
                NoteSeverity.WARNING,
                f"None of {len(adapter_entries)} adapter entries declared a valid memory size.",
            )
        )

    return candidates, notes


def select_capacity(candidates: Sequence[AdapterCandidate]) -> Optional[AdapterCandidate]:
    """Pick the adapter with the largest capacity (compared in rounded GB).

    Equal capacities keep the first candidate in registry enumeration order.
    """
    best: Optional[AdapterCandidate] = None
    for candidate in candidates:
        if best is None or candidate.capacity_gb > best.capacity_gb:
            best = candidate
    return best


def sample_memory_usage(counters: CounterSource) -> Tuple[GBReading, List[Note]]:
    """Sum dedicated memory usage across all counter instances.

    Returns:
        (used GB or UNAVAILABLE, notes). A summed zero is a valid reading.
    """
    try:
        samples = counters.sample(DEDICATED_USAGE_COUNTER)
    except SourceError as e:
        logger.warning(f"Dedicated usage query failed: {e}")
        return UNAVAILABLE, [Note(STAGE_USAGE, NoteSeverity.WARNING, str(e))]

    if not samples:
        return UNAVAILABLE, [
            Note(STAGE_USAGE, NoteSeverity.WARNING, "No dedicated memory usage counter instances found.")
        ]

    values = [s.cooked_value for s in samples if s.cooked_value is not None]
    if not values:
        return UNAVAILABLE, [
            Note(
                STAGE_USAGE,
                NoteSeverity.WARNING,
                f"All {len(samples)} dedicated memory usage instances returned no value.",
            )
        ]

    total_bytes = sum(values)
    logger.debug(f"Dedicated usage: {total_bytes:.0f} bytes across {len(values)} instance(s)")
    return bytes_to_gb(total_bytes), []


def check_consistency(used_gb: GBReading, total_gb: GBReading) -> List[Note]:
    """Flag usage above capacity; never alters the readings."""
    if not (is_available(used_gb) and is_available(total_gb)):
        return []
    if used_gb > total_gb:
        message = (
            f"Used VRAM ({format_gb(used_gb)} GB) exceeds total VRAM ({format_gb(total_gb)} GB); "
            "counters may double count processes or cover a different adapter."
        )
        logger.warning(message)
        return [Note(STAGE_CONSISTENCY, NoteSeverity.HIGH, message)]
    return []


def resolve_memory_stats(registry: AdapterRegistry, counters: CounterSource) -> MemoryStats:
    """Resolve used and total VRAM for the reporting adapter."""
    notes: List[Note] = []

    used_gb, usage_notes = sample_memory_usage(counters)
    notes.extend(usage_notes)

    candidates, scan_notes = scan_adapters(registry)
    notes.extend(scan_notes)

    selected = select_capacity(candidates)
    total_gb: GBReading = selected.capacity_gb if selected else UNAVAILABLE
    if selected:
        logger.debug(
            f"Selected adapter {selected.key_name} ({selected.description}) "
            f"with {format_gb(total_gb)} GB out of {len(candidates)} candidate(s)"
        )

    notes.extend(check_consistency(used_gb, total_gb))

    return MemoryStats(
        used_gb=used_gb,
        total_gb=total_gb,
        display=_memory_display(used_gb, total_gb, selected),
        notes=tuple(notes),
    )


def _memory_display(
    used_gb: GBReading, total_gb: GBReading, selected: Optional[AdapterCandidate]
) -> str:
    text = f"VRAM: {format_gb(used_gb)}/{format_gb(total_gb)} GB"
    if selected:
        text += f" | {selected.description}"
    return text
