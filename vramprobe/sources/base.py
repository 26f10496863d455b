"""Base classes and protocols for OS instrumentation sources."""

from dataclasses import dataclass
from typing import Any, List, Optional, Protocol


class SourceError(Exception):
    """Raised when an instrumentation source cannot be queried."""


class RegistryUnavailableError(SourceError):
    """The adapter class registry location could not be opened or enumerated."""


class CounterQueryError(SourceError):
    """A performance-counter query failed or returned unparseable data."""


@dataclass
class RegistryEntry:
    """Raw values read from one display-adapter registry subkey.

    Attributes:
        key_name: Subkey name (e.g. "0000", "0001", "Configuration")
        description: DriverDesc value, or None if missing
        memory_size: HardwareInformation.qwMemorySize as stored (int for
                     REG_QWORD, bytes for REG_BINARY, str if the driver wrote
                     a string), or None if missing
    """
    key_name: str
    description: Optional[str] = None
    memory_size: Any = None


@dataclass
class CounterSample:
    """One instance reading of a performance counter.

    Attributes:
        instance: Counter instance name (e.g. "pid_1234_luid_0x0_phys_0_eng_0_engtype_3d")
        cooked_value: Normalized sample value, or None if the instance had no
                      valid reading
    """
    instance: str
    cooked_value: Optional[float] = None


class AdapterRegistry(Protocol):
    """Protocol for reading display-adapter entries from the hardware registry."""

    def list_adapter_entries(self) -> List[RegistryEntry]:
        """Return every subkey under the display-adapter class key.

        Filtering by name and parsing of values is left to the caller.

        Raises:
            RegistryUnavailableError: If the class key cannot be read
        """
        ...


class CounterSource(Protocol):
    """Protocol for sampling a performance-counter path."""

    def sample(self, counter_path: str) -> List[CounterSample]:
        """Return one sample per counter instance matching ``counter_path``.

        An empty list means the path matched no instances.

        Raises:
            CounterQueryError: If the counter subsystem could not be queried
        """
        ...
