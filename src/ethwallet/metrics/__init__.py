"""Metrics — Prometheus metrics collection and exposure."""

from __future__ import annotations

from ethwallet.metrics.collector import MetricsCollector, WalletMetrics

__all__ = ["MetricsCollector", "WalletMetrics"]
