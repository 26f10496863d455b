"""Prometheus text exposition of a snapshot (node-exporter textfile format)."""

from typing import cast

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from vramprobe.models import ProbeResult, is_available


def build_registry(result: ProbeResult) -> CollectorRegistry:
    """Create a fresh registry holding gauges for one snapshot.

    Unavailable readings get no value sample; their source_available flag is 0.
    """
    registry = CollectorRegistry()

    utilization = Gauge(
        "vramprobe_gpu_utilization_pct",
        "GPU engine utilization percentage",
        ["engine_category"],
        registry=registry,
    )
    available = Gauge(
        "vramprobe_source_available",
        "1 if the field was measured, 0 if no data was obtained",
        ["field"],
        registry=registry,
    )

    memory = result.memory
    # Unlabelled gauges export 0 as soon as they exist, so only create measured ones
    if is_available(memory.used_gb):
        Gauge(
            "vramprobe_vram_used_gb", "Dedicated GPU memory in use in GB", registry=registry
        ).set(memory.used_gb)
    if is_available(memory.total_gb):
        Gauge(
            "vramprobe_vram_total_gb", "VRAM capacity of the reporting adapter in GB", registry=registry
        ).set(memory.total_gb)
    if is_available(result.utilization.percent):
        utilization.labels(engine_category=result.utilization.engine_category).set(
            result.utilization.percent
        )

    available.labels(field="used_gb").set(int(is_available(memory.used_gb)))
    available.labels(field="total_gb").set(int(is_available(memory.total_gb)))
    available.labels(field="utilization_pct").set(int(is_available(result.utilization.percent)))

    return registry


def render_metrics(result: ProbeResult) -> bytes:
    """Generate Prometheus metrics output for one snapshot."""
    output = generate_latest(build_registry(result))
    return cast(bytes, output) if output else b""
