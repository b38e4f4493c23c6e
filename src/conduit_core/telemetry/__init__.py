"""Conduit Telemetry - OpenTelemetry metrics."""

from opentelemetry import metrics as otel_metrics

from conduit_core.config import TelemetryConfig

from .metrics import ConduitMetrics, MetricLabels


def setup_telemetry(config: TelemetryConfig | None = None) -> ConduitMetrics | None:
    """Build the metrics collection from the global meter provider.

    Args:
        config: Telemetry configuration (uses defaults if None)

    Returns:
        ConduitMetrics, or None when telemetry is disabled
    """
    config = config or TelemetryConfig()
    if not config.enabled:
        return None

    meter = otel_metrics.get_meter(config.service_name)
    return ConduitMetrics(meter)


__all__ = [
    "ConduitMetrics",
    "MetricLabels",
    "setup_telemetry",
]
