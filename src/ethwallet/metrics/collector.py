"""Metrics collector — Prometheus counters, gauges, histograms.

- ``ethwallet_stats_total`` gauge-vec (accounts, pending_transactions)
- ``ethwallet_transaction_outcome_total`` counter-vec (accepted, rejected)
- ``ethwallet_reconcile_histogram``
- ``ethwallet_ledger_call_histogram`` (per JSON-RPC method)
- ``ethwallet_cron_histogram``
- ``ethwallet_cron_last_execution_gauge``
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ethwallet.engine.models.transaction import TxStatus


_PREFIX = "ethwallet"

_STAT_LABELS = ("entity",)


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`WalletMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def gauge(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Gauge:
        """Register and return a Gauge."""
        return Gauge(name, doc, labels, registry=self._registry)

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class WalletMetrics:
    """High-level wallet engine metrics.

    All histograms track operation duration in seconds.
    """

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._stats = self._collector.gauge(
            f"{_PREFIX}_stats_total",
            "Entity counts in the wallet",
            _STAT_LABELS,
        )
        self._outcomes = self._collector.counter(
            f"{_PREFIX}_transaction_outcome_total",
            "Transactions resolved by reconciliation",
            ("status",),
        )
        self._reconcile = self._collector.histogram(
            f"{_PREFIX}_reconcile_histogram",
            "Duration of reconciliation passes",
        )
        self._ledger_call = self._collector.histogram(
            f"{_PREFIX}_ledger_call_histogram",
            "Duration of ledger JSON-RPC calls",
            ("method",),
        )
        self._cron_histogram = self._collector.histogram(
            f"{_PREFIX}_cron_histogram",
            "Duration of cron job executions",
            ("job_name",),
        )
        self._cron_last = self._collector.gauge(
            f"{_PREFIX}_cron_last_execution_gauge",
            "Timestamp of last cron execution",
            ("job_name",),
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    # -- Stat setters --

    def set_account_count(self, count: int) -> None:
        """Set the number of accounts in the wallet."""
        self._stats.labels(entity="accounts").set(count)

    def set_pending_count(self, count: int) -> None:
        """Set the number of transactions waiting in the buffer."""
        self._stats.labels(entity="pending_transactions").set(count)

    def record_outcome(self, status: TxStatus) -> None:
        """Count one transaction reaching a terminal status."""
        self._outcomes.labels(status=status.name.lower()).inc()

    # -- Operation trackers (context managers) --

    @contextmanager
    def track_reconcile(self) -> Iterator[None]:
        """Track the duration of a reconciliation pass."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._reconcile.observe(time.monotonic() - start)

    @contextmanager
    def track_ledger_call(self, method: str) -> Iterator[None]:
        """Track the duration of one JSON-RPC call."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._ledger_call.labels(method=method).observe(time.monotonic() - start)

    @contextmanager
    def track_cron(self, job_name: str) -> Iterator[None]:
        """Track the duration of a cron job and record last execution time."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._cron_histogram.labels(job_name=job_name).observe(time.monotonic() - start)
            self._cron_last.labels(job_name=job_name).set(time.time())
