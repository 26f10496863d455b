"""Snapshot data model: readings, diagnostic notes and per-stage stats."""

import enum
from dataclasses import dataclass, field
from typing import List, Tuple, Union

BYTES_PER_GB = 2 ** 30

ENGINE_3D = "3D Engine"
ENGINE_MAX_ANY = "Max of Any Engine"
ENGINE_UNAVAILABLE = "unavailable"


class Unavailable(enum.Enum):
    """Marks a field for which no data was obtained (distinct from a measured zero)."""

    UNAVAILABLE = "N/A"

    def __repr__(self) -> str:
        return "UNAVAILABLE"

    def __str__(self) -> str:
        return self.value


UNAVAILABLE = Unavailable.UNAVAILABLE

GBReading = Union[float, Unavailable]
PercentReading = Union[int, Unavailable]


def is_available(reading: object) -> bool:
    return reading is not UNAVAILABLE


def bytes_to_gb(value: float) -> float:
    """Convert a byte count to GB (2^30), rounded to one decimal."""
    return round(value / BYTES_PER_GB, 1)


def round_percent(value: float) -> int:
    return int(round(value))


class NoteSeverity(str, enum.Enum):
    INFO = "info"
    WARNING = "warning"
    HIGH = "high"


@dataclass(frozen=True)
class Note:
    """A diagnostic note recorded by one resolution stage."""

    stage: str
    severity: NoteSeverity
    message: str

    def __str__(self) -> str:
        prefix = "[HIGH] " if self.severity is NoteSeverity.HIGH else ""
        return f"{prefix}{self.stage}: {self.message}"


def join_notes(notes: Union[List[Note], Tuple[Note, ...]]) -> str:
    """Join notes into one whitespace-normalized string."""
    return " ".join(" ".join(str(note).split()) for note in notes)


@dataclass(frozen=True)
class AdapterCandidate:
    """An adapter entry with a declared, positive memory size."""

    capacity_bytes: int
    description: str = ""
    key_name: str = ""

    @property
    def capacity_gb(self) -> float:
        return bytes_to_gb(self.capacity_bytes)


@dataclass(frozen=True)
class MemoryStats:
    """Resolved VRAM usage and capacity for the reporting adapter."""

    used_gb: GBReading = UNAVAILABLE
    total_gb: GBReading = UNAVAILABLE
    display: str = ""
    notes: Tuple[Note, ...] = field(default_factory=tuple)

    @property
    def error_notes(self) -> str:
        return join_notes(self.notes)


@dataclass(frozen=True)
class UtilizationStats:
    """Resolved GPU utilization and the engine category it was taken from."""

    percent: PercentReading = UNAVAILABLE
    engine_category: str = ENGINE_UNAVAILABLE
    display: str = ""
    notes: Tuple[Note, ...] = field(default_factory=tuple)

    @property
    def error_notes(self) -> str:
        return join_notes(self.notes)


@dataclass(frozen=True)
class ProbeResult:
    """One snapshot: memory stats plus utilization stats."""

    memory: MemoryStats
    utilization: UtilizationStats

    @property
    def notes(self) -> Tuple[Note, ...]:
        return self.memory.notes + self.utilization.notes
