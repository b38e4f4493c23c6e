"""Conduit metrics schema - OpenTelemetry conventions.

Metrics:
- conduit_tool_calls_total: routed tool calls by connection type and status
- conduit_connection_attempts_total: establishment attempts by type and outcome
- conduit_tool_call_duration_seconds: routed tool call latency
- conduit_connected_peers: peers currently attached to the protocol server

Without an SDK installed by the host, the global meter provider is a no-op.
"""

from dataclasses import dataclass
from typing import Any

from opentelemetry import metrics
from opentelemetry.metrics import Counter, Histogram, UpDownCounter

METRIC_PREFIX = "conduit"


@dataclass
class MetricLabels:
    """Standard metric labels/attributes."""

    CONNECTION_TYPE = "connection_type"
    TOOL_NAME = "tool_name"
    STATUS = "status"
    ERROR_CODE = "error_code"

    STATUS_SUCCESS = "success"
    STATUS_ERROR = "error"
    STATUS_TIMEOUT = "timeout"


class ConduitMetrics:
    """Conduit metrics collection."""

    def __init__(self, meter: metrics.Meter):
        """Initialize metrics.

        Args:
            meter: OpenTelemetry Meter instance
        """
        self._meter = meter

        self.tool_calls_total: Counter = self._meter.create_counter(
            name=f"{METRIC_PREFIX}_tool_calls_total",
            description="Total number of routed tool calls",
            unit="1",
        )
        self.connection_attempts_total: Counter = self._meter.create_counter(
            name=f"{METRIC_PREFIX}_connection_attempts_total",
            description="Total number of connection establishment attempts",
            unit="1",
        )
        self.tool_call_duration_seconds: Histogram = self._meter.create_histogram(
            name=f"{METRIC_PREFIX}_tool_call_duration_seconds",
            description="Routed tool call duration in seconds",
            unit="s",
        )
        # UpDownCounter used as a gauge
        self.connected_peers: UpDownCounter = self._meter.create_up_down_counter(
            name=f"{METRIC_PREFIX}_connected_peers",
            description="Number of peers attached to the protocol server",
            unit="1",
        )

    def record_tool_call(
        self,
        connection_type: str,
        tool_name: str,
        duration_seconds: float,
        status: str,
        error_code: str | None = None,
    ) -> None:
        """Record one routed tool call.

        Args:
            connection_type: Type tag of the connection used
            tool_name: Tool name
            duration_seconds: Call duration
            status: success, error or timeout
            error_code: Error code when status is not success
        """
        labels: dict[str, Any] = {
            MetricLabels.CONNECTION_TYPE: connection_type,
            MetricLabels.TOOL_NAME: tool_name,
            MetricLabels.STATUS: status,
        }
        if error_code:
            labels[MetricLabels.ERROR_CODE] = error_code

        self.tool_calls_total.add(1, labels)
        self.tool_call_duration_seconds.record(duration_seconds, labels)

    def record_connection_attempt(self, connection_type: str, status: str) -> None:
        self.connection_attempts_total.add(
            1,
            {MetricLabels.CONNECTION_TYPE: connection_type, MetricLabels.STATUS: status},
        )

    def peer_connected(self) -> None:
        self.connected_peers.add(1)

    def peer_disconnected(self) -> None:
        self.connected_peers.add(-1)
