"""Tests for readings, sentinels and notes."""

from vramprobe.models import (
    UNAVAILABLE,
    AdapterCandidate,
    MemoryStats,
    Note,
    NoteSeverity,
    bytes_to_gb,
    is_available,
    join_notes,
    round_percent,
)


class TestConversions:
    def test_one_gib(self):
        assert bytes_to_gb(1073741824) == 1.0

    def test_zero_bytes_is_zero_gb(self):
        assert bytes_to_gb(0) == 0.0

    def test_rounds_to_one_decimal(self):
        assert bytes_to_gb(int(1.46 * 2 ** 30)) == 1.5
        assert bytes_to_gb(int(7.94 * 2 ** 30)) == 7.9

    def test_monotonic(self):
        sizes = [0, 2 ** 20, 2 ** 29, 2 ** 30, 3 * 2 ** 30, 24 * 2 ** 30]
        converted = [bytes_to_gb(s) for s in sizes]
        assert converted == sorted(converted)

    def test_round_percent(self):
        assert round_percent(64.6) == 65
        assert round_percent(0.2) == 0


class TestSentinel:
    def test_zero_is_available(self):
        assert is_available(0)
        assert is_available(0.0)

    def test_sentinel_is_not_available(self):
        assert not is_available(UNAVAILABLE)

    def test_sentinel_is_not_zero(self):
        assert UNAVAILABLE != 0
        assert str(UNAVAILABLE) == "N/A"

    def test_stats_default_to_sentinel(self):
        stats = MemoryStats()
        assert stats.used_gb is UNAVAILABLE
        assert stats.total_gb is UNAVAILABLE


class TestNotes:
    def test_join_normalizes_whitespace(self):
        notes = [
            Note("memory usage", NoteSeverity.WARNING, "No   instances\nfound."),
            Note("consistency", NoteSeverity.HIGH, "Used exceeds total."),
        ]
        assert join_notes(notes) == (
            "memory usage: No instances found. [HIGH] consistency: Used exceeds total."
        )

    def test_join_empty(self):
        assert join_notes([]) == ""


class TestAdapterCandidate:
    def test_capacity_gb(self):
        assert AdapterCandidate(capacity_bytes=8 * 2 ** 30).capacity_gb == 8.0
