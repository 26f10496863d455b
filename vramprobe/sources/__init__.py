"""Instrumentation source factory."""

import logging
import platform
from typing import TYPE_CHECKING, Optional, Tuple

from vramprobe.sources.base import AdapterRegistry, CounterSource
from vramprobe.sources.windows import PowerShellCounterSource, WindowsAdapterRegistry

if TYPE_CHECKING:
    from vramprobe.config import Settings

logger = logging.getLogger(__name__)


def create_sources(config: Optional["Settings"] = None) -> Tuple[AdapterRegistry, CounterSource]:
    """Build the registry and counter providers for the current host.

    Only Windows exposes these sources. On other hosts the providers are still
    returned; their queries fail and the probe reports the fields as unavailable.
    """
    if config is None:
        from vramprobe.config import settings as config

    system = platform.system()
    if system != "Windows":
        logger.debug(f"Host platform is {system}; adapter registry and GPU counters will be unavailable")

    registry = WindowsAdapterRegistry(class_key=config.adapter_class_key)
    counters = PowerShellCounterSource(
        powershell_path=config.powershell_path,
        timeout=config.counter_timeout,
    )
    return registry, counters
