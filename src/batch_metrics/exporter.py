"""Ship the full metric registry to InfluxDB."""

from __future__ import annotations

import math
import numbers
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx

from .logging_setup import get_logger
from .registry import GaugeSummary, Metric, MetricRepository

logger = get_logger(__name__)


class SinkUnreachable(RuntimeError):
    """Raised when the time-series sink does not answer the initial handshake."""


def _escape_measurement(name: str) -> str:
    return name.replace(",", r"\,").replace(" ", r"\ ")


def _escape_tag(value: str) -> str:
    return value.replace(",", r"\,").replace("=", r"\=").replace(" ", r"\ ")


def _format_field(value: float | int) -> Optional[str]:
    if isinstance(value, int):
        return f"{value}i"
    value = float(value)
    if not math.isfinite(value):
        return None
    return repr(value)


def _fields(value: Any) -> Dict[str, float | int]:
    if isinstance(value, GaugeSummary):
        return value.as_dict()
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return {}
    return {"value": value if isinstance(value, int) else float(value)}


def to_line_protocol(
    metrics: Iterable[Metric], environment: str, timestamp_ms: int
) -> List[str]:
    """Render metrics as InfluxDB line protocol points tagged with ``environment``."""

    lines: list[str] = []
    tag = f"environment={_escape_tag(environment)}"
    for metric in metrics:
        if "\n" in metric.name or "\r" in metric.name:
            logger.debug("exporter.skip_metric", metric=metric.name, reason="line break in name")
            continue
        rendered = []
        for key, raw in _fields(metric.value).items():
            field_value = _format_field(raw)
            if field_value is not None:
                rendered.append(f"{key}={field_value}")
        if not rendered:
            logger.debug("exporter.skip_metric", metric=metric.name)
            continue
        lines.append(
            f"{_escape_measurement(metric.name)},{tag} {','.join(rendered)} {timestamp_ms}"
        )
    return lines


class InfluxdbMetricsExporter:
    """Report every registry entry to an InfluxDB database on each ``export`` call.

    The connection is checked once at construction. Failed reports are logged and
    dropped; the next call sends whatever the registry holds at that point.
    """

    def __init__(
        self,
        registry: MetricRepository,
        server: str,
        port: int,
        database: str,
        user: str | None = None,
        password: str | None = None,
        environment: str = "default",
        *,
        timeout_seconds: float = 5.0,
        use_https: bool = False,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.registry = registry
        self.database = database
        self.environment = environment
        self._clock = clock
        scheme = "https" if use_https else "http"
        self.base_url = f"{scheme}://{server}:{port}"
        auth = (user, password or "") if user else None
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout_seconds,
            auth=auth,
            transport=transport,
        )
        try:
            self._handshake()
        except SinkUnreachable:
            self._client.close()
            raise

    def _handshake(self) -> None:
        try:
            response = self._client.get("/ping")
        except httpx.HTTPError as exc:
            raise SinkUnreachable(f"InfluxDB at {self.base_url} is unreachable: {exc}") from exc
        if not response.is_success:
            raise SinkUnreachable(
                f"InfluxDB at {self.base_url} rejected handshake with status {response.status_code}"
            )
        logger.info(
            "exporter.connected",
            url=self.base_url,
            database=self.database,
            version=response.headers.get("X-Influxdb-Version"),
        )

    def export(self) -> bool:
        """Send the current registry contents; return whether the sink accepted them."""

        timestamp_ms = int(self._clock() * 1000)
        lines = to_line_protocol(self.registry.find_all(), self.environment, timestamp_ms)
        if not lines:
            logger.debug("exporter.nothing_to_export")
            return True

        try:
            response = self._client.post(
                "/write",
                params={"db": self.database, "precision": "ms"},
                content="\n".join(lines).encode("utf-8"),
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning(
                "exporter.export_failed",
                url=self.base_url,
                points=len(lines),
                error=str(exc),
            )
            return False

        logger.debug("exporter.exported", points=len(lines))
        return True

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "InfluxdbMetricsExporter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["InfluxdbMetricsExporter", "SinkUnreachable", "to_line_protocol"]
