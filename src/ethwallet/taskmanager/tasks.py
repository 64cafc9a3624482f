"""Background task definitions — cron job handlers.

- ``reconcile_transactions`` — resolve buffered transactions from receipts
- ``calculate_metrics`` — push account and pending counts to Prometheus
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ethwallet.engine.client import WalletEngine
    from ethwallet.metrics.collector import WalletMetrics

logger = logging.getLogger(__name__)

# Cron period (seconds); the reconcile period comes from TaskConfig
CALCULATE_METRICS_PERIOD = 15


async def task_reconcile_transactions(engine: WalletEngine) -> None:
    """Run one reconciliation pass if a wallet exists."""
    if await engine.datastore.get() is None:
        return
    report = await engine.transaction_service.reconcile()
    if report.changed:
        logger.info(
            "Reconciled %d accepted, %d rejected, %d still pending",
            len(report.accepted),
            len(report.rejected),
            len(report.pending),
        )


async def task_calculate_metrics(engine: WalletEngine, metrics: WalletMetrics) -> None:
    """Count accounts and buffered transactions."""
    store = await engine.datastore.get()
    if store is None:
        metrics.set_account_count(0)
        metrics.set_pending_count(0)
        return
    metrics.set_account_count(len(store.accounts))
    metrics.set_pending_count(len(store.transaction_buffer))
