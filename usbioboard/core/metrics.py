"""Gauge factory for pin values.

Each configured pin publishes one prometheus gauge named
``<prefix>_<pin name>``. The configured labels are constant for the pin, so
the sink handed to the poll loop is the labelled child of the gauge.
"""

from __future__ import annotations

from typing import Optional, Protocol

from prometheus_client import REGISTRY, CollectorRegistry, Gauge

from usbioboard.core.exceptions import ConfigurationError


class MetricSink(Protocol):
    """Anything the poll loop can publish a sample into."""

    def set(self, value: float) -> None: ...


class GaugeFactory:
    """Creates pin gauges in one collector registry."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self._registry = registry if registry is not None else REGISTRY

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def create(self, name: str, documentation: str, labels: dict[str, str]) -> MetricSink:
        """Register a gauge and return the sink for its constant label set.

        Raises:
            ConfigurationError: if the name is invalid or already registered
        """
        label_names = sorted(labels)
        try:
            gauge = Gauge(name, documentation, labelnames=label_names, registry=self._registry)
        except ValueError as exc:
            raise ConfigurationError("name", f"cannot register metric {name!r}: {exc}") from exc

        if not label_names:
            return gauge
        return gauge.labels(**labels)
