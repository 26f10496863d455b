"""Rendering of probe results: the USED;TOTAL;UTIL line and the display block."""

from typing import List, Union

from vramprobe.models import (
    UNAVAILABLE,
    GBReading,
    NoteSeverity,
    PercentReading,
    ProbeResult,
)

FIELD_SEPARATOR = ";"


def format_gb(reading: GBReading) -> str:
    """Render a GB reading with exactly one decimal, or the sentinel token."""
    if reading is UNAVAILABLE:
        return str(UNAVAILABLE)
    return f"{float(reading):.1f}"


def format_percent(reading: PercentReading) -> str:
    if reading is UNAVAILABLE:
        return str(UNAVAILABLE)
    return str(int(reading))


def format_line(result: ProbeResult) -> str:
    """Build the machine-parseable line, e.g. ``1.5;8.0;65`` or ``N/A;8.0;N/A``."""
    return FIELD_SEPARATOR.join(
        (
            format_gb(result.memory.used_gb),
            format_gb(result.memory.total_gb),
            format_percent(result.utilization.percent),
        )
    )


def format_display(result: ProbeResult) -> str:
    """Build the multi-section human-readable summary of a snapshot."""
    memory = result.memory
    utilization = result.utilization

    lines: List[str] = [
        "GPU Memory",
        "----------",
        f"  Used:     {_with_unit(memory.used_gb, format_gb(memory.used_gb), ' GB')}",
        f"  Total:    {_with_unit(memory.total_gb, format_gb(memory.total_gb), ' GB')}",
        f"  Summary:  {memory.display}",
        "",
        "GPU Utilization",
        "---------------",
        f"  Load:     {_with_unit(utilization.percent, format_percent(utilization.percent), '%')}",
        f"  Engine:   {utilization.engine_category}",
        f"  Summary:  {utilization.display}",
    ]

    notes = result.notes
    if notes:
        lines += ["", "Notes", "-----"]
        for note in notes:
            marker = "!!" if note.severity is NoteSeverity.HIGH else "-"
            lines.append(f"  {marker} {' '.join(str(note).split())}")

    return "\n".join(lines)


def _with_unit(reading: Union[GBReading, PercentReading], text: str, unit: str) -> str:
    if reading is UNAVAILABLE:
        return text
    return f"{text}{unit}"
