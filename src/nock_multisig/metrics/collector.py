"""Metrics collector — Prometheus counters and histograms for core operations.

- ``multisig_transactions_assembled_total``
- ``multisig_signatures_added_total``
- ``multisig_signatures_rejected_total``
- ``multisig_validations_total{outcome}``
- ``multisig_operation_seconds{operation}``
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator

_PREFIX = "multisig"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`MultisigMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)


class MultisigMetrics:
    """Counters for assembly, signing and validation."""

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._assembled = self._collector.counter(
            f"{_PREFIX}_transactions_assembled",
            "Transactions assembled",
        )
        self._signatures_added = self._collector.counter(
            f"{_PREFIX}_signatures_added",
            "Signatures recorded on a spend",
        )
        self._signatures_rejected = self._collector.counter(
            f"{_PREFIX}_signatures_rejected",
            "Signatures refused because the signer is outside the lock",
        )
        self._validations = self._collector.counter(
            f"{_PREFIX}_validations",
            "Transaction validations by outcome",
            ("outcome",),
        )
        self._duration = self._collector.histogram(
            f"{_PREFIX}_operation_seconds",
            "Duration of core operations",
            ("operation",),
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    def transaction_assembled(self) -> None:
        self._assembled.inc()

    def signature_added(self) -> None:
        self._signatures_added.inc()

    def signature_rejected(self) -> None:
        self._signatures_rejected.inc()

    def validation(self, *, valid: bool) -> None:
        """Count one validation, labelled ``valid`` or ``incomplete``."""
        self._validations.labels(outcome="valid" if valid else "incomplete").inc()

    @contextmanager
    def track(self, operation: str) -> Iterator[None]:
        """Track the duration of one core operation."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._duration.labels(operation=operation).observe(time.monotonic() - start)
