"""Windows instrumentation sources: adapter class registry and performance counters.

Registry:
    HKLM\\SYSTEM\\CurrentControlSet\\Control\\Class\\{4d36e968-e325-11ce-bfc1-08002be10318}
    Each adapter instance is a subkey (0000, 0001, ...) carrying DriverDesc and
    HardwareInformation.qwMemorySize.

Performance counters:
    Queried through PowerShell Get-Counter, one process per counter path. The
    samples are serialized with ConvertTo-Json so no pywin32 dependency is
    needed.
"""

import json
import logging
import math
import subprocess
from typing import Any, List, Optional

from vramprobe.sources.base import (
    CounterQueryError,
    CounterSample,
    RegistryEntry,
    RegistryUnavailableError,
)

logger = logging.getLogger(__name__)

DISPLAY_ADAPTER_CLASS_KEY = (
    r"SYSTEM\CurrentControlSet\Control\Class\{4d36e968-e325-11ce-bfc1-08002be10318}"
)
DESCRIPTION_VALUE = "DriverDesc"
MEMORY_SIZE_VALUE = "HardwareInformation.qwMemorySize"

# CounterSample.Status; anything else means the instance has no usable reading
PDH_CSTATUS_VALID_DATA = 0
PDH_CSTATUS_NEW_DATA = 1

_GET_COUNTER_SCRIPT = (
    "$samples = @((Get-Counter -Counter '{path}' -ErrorAction SilentlyContinue).CounterSamples"
    " | Select-Object InstanceName, CookedValue, Status); "
    "ConvertTo-Json -InputObject $samples -Compress"
)


class WindowsAdapterRegistry:
    """Reads display-adapter subkeys through the ``winreg`` module."""

    def __init__(self, class_key: str = DISPLAY_ADAPTER_CLASS_KEY):
        self._class_key = class_key

    def list_adapter_entries(self) -> List[RegistryEntry]:
        try:
            import winreg
        except ImportError as e:
            raise RegistryUnavailableError(f"Windows registry not available on this host: {e}")

        entries: List[RegistryEntry] = []
        try:
            with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, self._class_key) as class_key:
                index = 0
                while True:
                    try:
                        name = winreg.EnumKey(class_key, index)
                    except OSError:
                        break
                    index += 1
                    entries.append(self._read_entry(winreg, class_key, name))
        except OSError as e:
            raise RegistryUnavailableError(
                f"Cannot open adapter class key HKLM\\{self._class_key}: {e}"
            )

        logger.debug(f"Enumerated {len(entries)} subkeys under adapter class key")
        return entries

    def _read_entry(self, winreg: Any, class_key: Any, name: str) -> RegistryEntry:
        entry = RegistryEntry(key_name=name)
        try:
            with winreg.OpenKey(class_key, name) as subkey:
                entry.description = _query_value(winreg, subkey, DESCRIPTION_VALUE)
                entry.memory_size = _query_value(winreg, subkey, MEMORY_SIZE_VALUE)
        except OSError as e:
            # Subkeys such as "Properties" are ACL-protected
            logger.debug(f"Skipping unreadable adapter subkey {name}: {e}")
        return entry


def _query_value(winreg: Any, key: Any, value_name: str) -> Any:
    try:
        value, _value_type = winreg.QueryValueEx(key, value_name)
    except FileNotFoundError:
        return None
    return value


class PowerShellCounterSource:
    """Samples performance counters by running ``Get-Counter`` in PowerShell."""

    def __init__(self, powershell_path: str = "powershell", timeout: float = 15.0):
        """Initialize the counter source.

        Args:
            powershell_path: PowerShell executable (default: "powershell")
            timeout: Seconds to wait for one Get-Counter call
        """
        self._powershell_path = powershell_path
        self._timeout = timeout

    def sample(self, counter_path: str) -> List[CounterSample]:
        script = _GET_COUNTER_SCRIPT.format(path=counter_path.replace("'", "''"))
        try:
            result = subprocess.run(
                [self._powershell_path, "-NoProfile", "-NonInteractive", "-Command", script],
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired:
            raise CounterQueryError(f"Get-Counter timed out after {self._timeout}s for {counter_path}")
        except (FileNotFoundError, PermissionError) as e:
            raise CounterQueryError(f"Cannot run {self._powershell_path}: {e}")

        if result.returncode != 0:
            stderr = result.stderr.strip().splitlines()
            detail = stderr[0] if stderr else f"exit code {result.returncode}"
            raise CounterQueryError(f"Get-Counter failed for {counter_path}: {detail}")

        return parse_counter_json(result.stdout)


def parse_counter_json(output: str) -> List[CounterSample]:
    """Parse the ConvertTo-Json output of Get-Counter samples.

    Expected format:
        [{"InstanceName":"pid_4_luid_0x00000000_0x0000d1f2_phys_0_eng_0_engtype_3d",
          "CookedValue":12.5,"Status":0}, ...]

    Raises:
        CounterQueryError: If the output is not a JSON list of objects
    """
    text = output.strip()
    if not text:
        return []

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CounterQueryError(f"Unparseable Get-Counter output: {e}")

    # ConvertTo-Json collapses single-element arrays on older PowerShell
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise CounterQueryError(f"Unexpected Get-Counter output type: {type(data).__name__}")

    samples: List[CounterSample] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        samples.append(
            CounterSample(
                instance=str(item.get("InstanceName") or ""),
                cooked_value=_cooked_value(item),
            )
        )
    return samples


def _cooked_value(item: dict) -> Optional[float]:
    status = item.get("Status", PDH_CSTATUS_VALID_DATA)
    if status not in (PDH_CSTATUS_VALID_DATA, PDH_CSTATUS_NEW_DATA):
        return None
    value = item.get("CookedValue")
    if value is None or isinstance(value, bool):
        return None
    try:
        cooked = float(value)
    except (TypeError, ValueError):
        return None
    # ConvertTo-Json writes NaN and Infinity as strings
    if not math.isfinite(cooked):
        return None
    return cooked
