"""Pytest configuration and shared fixtures."""

from typing import Dict, List, Optional, Union

import pytest

from vramprobe.memory import DEDICATED_USAGE_COUNTER
from vramprobe.sources.base import (
    CounterQueryError,
    CounterSample,
    RegistryEntry,
    RegistryUnavailableError,
)
from vramprobe.utilization import ENGINE_3D_COUNTER, ENGINE_ANY_COUNTER

GIB = 2 ** 30


class FakeRegistry:
    """Adapter registry returning fabricated entries, or raising."""

    def __init__(self, entries: Optional[List[RegistryEntry]] = None, error: Optional[Exception] = None):
        self.entries = entries or []
        self.error = error
        self.calls = 0

    def list_adapter_entries(self) -> List[RegistryEntry]:
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.entries)


class FakeCounters:
    """Counter source keyed by counter path; unknown paths have no instances."""

    def __init__(self, samples: Optional[Dict[str, Union[List[CounterSample], Exception]]] = None):
        self.samples = samples or {}
        self.queried: List[str] = []

    def sample(self, counter_path: str) -> List[CounterSample]:
        self.queried.append(counter_path)
        value = self.samples.get(counter_path, [])
        if isinstance(value, Exception):
            raise value
        return list(value)


def counter_values(*values) -> List[CounterSample]:
    """Build counter samples from cooked values (None means no reading)."""
    return [CounterSample(instance=f"instance_{i}", cooked_value=v) for i, v in enumerate(values)]


def adapter(key_name: str, description: str = "Test GPU", memory_size=8 * GIB) -> RegistryEntry:
    return RegistryEntry(key_name=key_name, description=description, memory_size=memory_size)


@pytest.fixture
def eight_gb_registry():
    """Registry with one 8 GB discrete adapter."""
    return FakeRegistry([adapter("0000", "NVIDIA GeForce RTX 3070", 8 * GIB)])


@pytest.fixture
def empty_registry():
    return FakeRegistry([])


@pytest.fixture
def healthy_counters():
    """Counters reporting 1.5 GB used and 65% 3D utilization."""
    return FakeCounters(
        {
            DEDICATED_USAGE_COUNTER: counter_values(GIB, GIB // 2),
            ENGINE_3D_COUNTER: counter_values(40.0, 25.0),
            ENGINE_ANY_COUNTER: counter_values(40.0, 25.0, 5.0),
        }
    )


@pytest.fixture
def unavailable_registry():
    return FakeRegistry(error=RegistryUnavailableError("Cannot open adapter class key"))


@pytest.fixture
def failing_counters():
    error = CounterQueryError("Get-Counter failed")
    return FakeCounters(
        {
            DEDICATED_USAGE_COUNTER: error,
            ENGINE_3D_COUNTER: error,
            ENGINE_ANY_COUNTER: error,
        }
    )

