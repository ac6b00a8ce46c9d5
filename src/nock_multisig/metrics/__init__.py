"""Metrics — Prometheus metrics collection and exposure."""

from __future__ import annotations

from nock_multisig.metrics.collector import MetricsCollector, MultisigMetrics

__all__ = ["MetricsCollector", "MultisigMetrics"]
