"""Pydantic models for the JSON rendering of a snapshot."""

from pydantic import BaseModel, Field

from vramprobe.formatter import format_line
from vramprobe.models import Note, ProbeResult, is_available


class NoteReport(BaseModel):
    stage: str
    severity: str
    message: str

    @classmethod
    def from_note(cls, note: Note) -> "NoteReport":
        return cls(stage=note.stage, severity=note.severity.value, message=note.message)


class MemoryReport(BaseModel):
    """Memory section; unavailable readings are null, never 0."""

    used_gb: float | None = Field(default=None, description="Dedicated VRAM in use, GB")
    used_available: bool = False
    total_gb: float | None = Field(default=None, description="Capacity of the reporting adapter, GB")
    total_available: bool = False
    display: str = ""


class UtilizationReport(BaseModel):
    percent: int | None = None
    available: bool = False
    engine_category: str
    display: str = ""


class ProbeReport(BaseModel):
    line: str = Field(..., description="USED;TOTAL;UTIL line as printed first on stdout")
    memory: MemoryReport
    utilization: UtilizationReport
    notes: list[NoteReport] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ProbeResult) -> "ProbeReport":
        memory = result.memory
        utilization = result.utilization
        used_ok = is_available(memory.used_gb)
        total_ok = is_available(memory.total_gb)
        percent_ok = is_available(utilization.percent)
        return cls(
            line=format_line(result),
            memory=MemoryReport(
                used_gb=memory.used_gb if used_ok else None,
                used_available=used_ok,
                total_gb=memory.total_gb if total_ok else None,
                total_available=total_ok,
                display=memory.display,
            ),
            utilization=UtilizationReport(
                percent=utilization.percent if percent_ok else None,
                available=percent_ok,
                engine_category=utilization.engine_category,
                display=utilization.display,
            ),
            notes=[NoteReport.from_note(n) for n in result.notes],
        )
