"""Task manager — periodic background jobs for the wallet engine.

Runs the optional external schedule around the wallet core:
- Transaction reconciliation (re-query receipts of buffered transactions)
- Metrics calculation (account and pending counts for Prometheus gauges)
"""

from __future__ import annotations

from ethwallet.taskmanager.manager import CronJob, TaskManager

__all__ = ["CronJob", "TaskManager"]
