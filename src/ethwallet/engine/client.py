"""WalletEngine — central engine client owning all services."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ethwallet.errors.wallet_errors import WalletError

if TYPE_CHECKING:
    from ethwallet.chain.ledger import LedgerClient, LedgerProvider
    from ethwallet.config.settings import AppConfig
    from ethwallet.datastore.client import StoreBackend, WalletDatastore
    from ethwallet.engine.services.account_service import AccountService
    from ethwallet.engine.services.auth_service import AuthService
    from ethwallet.engine.services.transaction_service import TransactionService
    from ethwallet.eth.keys import KeyVault
    from ethwallet.metrics.collector import WalletMetrics
    from ethwallet.notifications.events import RawEvent
    from ethwallet.notifications.service import NotificationService
    from ethwallet.taskmanager.manager import TaskManager

logger = logging.getLogger(__name__)

# Error messages
_ERR_NOT_INITIALIZED = "Engine not initialized. Call initialize() first."


class WalletEngine:
    """Central engine that owns the store, the key vault, the ledger and services.

    Usage::

        engine = WalletEngine(AppConfig())
        await engine.initialize()
        await engine.auth_service.create_wallet("secret")
        account = await engine.account_service.create_account()
        await engine.close()
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        ledger: LedgerProvider | None = None,
        backend: StoreBackend | None = None,
        metrics: WalletMetrics | None = None,
    ) -> None:
        """Initialize engine with configuration.

        Args:
            config: Application configuration.
            ledger: Ledger provider to use instead of a JSON-RPC client; the
                caller owns its lifecycle.
            backend: Key-value backend to use instead of the configured one.
            metrics: Metrics sink shared with the HTTP layer; created from the
                config when omitted.
        """
        self._config = config
        self._initialized = False
        self._injected_ledger = ledger
        self._injected_backend = backend
        self._injected_metrics = metrics

        # Infrastructure components
        self._datastore: WalletDatastore | None = None
        self._vault: KeyVault | None = None
        self._ledger: LedgerProvider | None = None
        self._ledger_client: LedgerClient | None = None

        # Services
        self._auth_service: AuthService | None = None
        self._account_service: AccountService | None = None
        self._transaction_service: TransactionService | None = None
        self._task_manager: TaskManager | None = None
        self._metrics: WalletMetrics | None = None
        self._notifications: NotificationService | None = None

    async def initialize(self) -> None:
        """Open the store, connect the ledger and start background services.

        Raises:
            RuntimeError: If already initialized.
        """
        if self._initialized:
            msg = "Engine already initialized"
            raise RuntimeError(msg)

        from ethwallet.datastore.client import WalletDatastore
        from ethwallet.eth.keys import KeyVault

        self._datastore = WalletDatastore(self._config.store, self._injected_backend)
        await self._datastore.open()
        self._vault = KeyVault(
            self._datastore.backend, self._config.store.keystore_key, self._config.vault
        )

        from ethwallet.metrics.collector import WalletMetrics

        if self._injected_metrics is not None:
            self._metrics = self._injected_metrics
        elif self._config.metrics.enabled:
            self._metrics = WalletMetrics()

        if self._injected_ledger is not None:
            self._ledger = self._injected_ledger
        else:
            from ethwallet.chain.ledger import LedgerClient

            self._ledger_client = LedgerClient(self._config.ledger, metrics=self._metrics)
            await self._ledger_client.connect()
            self._ledger = self._ledger_client

        from ethwallet.engine.services.account_service import AccountService
        from ethwallet.engine.services.auth_service import AuthService
        from ethwallet.engine.services.transaction_service import TransactionService

        self._auth_service = AuthService(self)
        self._account_service = AccountService(self)
        self._transaction_service = TransactionService(self)

        from ethwallet.notifications.service import NotificationService

        if self._config.notifications.enabled:
            self._notifications = NotificationService()
            await self._notifications.start()

        from functools import partial

        from ethwallet.taskmanager.manager import CronJob, TaskManager
        from ethwallet.taskmanager.tasks import (
            CALCULATE_METRICS_PERIOD,
            task_calculate_metrics,
            task_reconcile_transactions,
        )

        if self._config.task.enabled:
            self._task_manager = TaskManager(metrics=self._metrics)
            self._task_manager.register(
                "reconcile_transactions",
                CronJob(
                    handler=partial(task_reconcile_transactions, self),
                    period=self._config.task.reconcile_period,
                ),
            )
            if self._metrics is not None:
                self._task_manager.register(
                    "calculate_metrics",
                    CronJob(
                        handler=partial(task_calculate_metrics, self, self._metrics),
                        period=CALCULATE_METRICS_PERIOD,
                    ),
                )
            await self._task_manager.start()

        self._initialized = True
        logger.info("Wallet engine initialized (store=%s)", self._config.store.engine)

    async def close(self) -> None:
        """Gracefully shut down all services and connections.

        Can be called multiple times (idempotent).
        """
        if not self._initialized:
            return

        # Stop task manager first (depends on services)
        if self._task_manager is not None:
            await self._task_manager.stop()
            self._task_manager = None

        if self._notifications is not None:
            await self._notifications.stop()
            self._notifications = None

        self._metrics = None
        self._auth_service = None
        self._account_service = None
        self._transaction_service = None

        if self._ledger_client is not None:
            await self._ledger_client.close()
            self._ledger_client = None
        self._ledger = None

        self._vault = None
        if self._datastore is not None:
            await self._datastore.close()
            self._datastore = None

        self._initialized = False

    async def emit(self, event: RawEvent) -> None:
        """Publish *event* to notification subscribers, if notifications are on."""
        if self._notifications is None:
            logger.debug("Notifications disabled, dropping %s event", event.type)
            return
        await self._notifications.notify(event)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def datastore(self) -> WalletDatastore:
        """Get the wallet datastore.

        Raises:
            RuntimeError: If engine not initialized.
        """
        if self._datastore is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._datastore

    @property
    def vault(self) -> KeyVault:
        """Get the key vault holding the account secrets."""
        if self._vault is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._vault

    @property
    def ledger(self) -> LedgerProvider:
        """Get the ledger provider."""
        if self._ledger is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._ledger

    @property
    def auth_service(self) -> AuthService:
        if self._auth_service is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._auth_service

    @property
    def account_service(self) -> AccountService:
        if self._account_service is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._account_service

    @property
    def transaction_service(self) -> TransactionService:
        if self._transaction_service is None:
            raise RuntimeError(_ERR_NOT_INITIALIZED)
        return self._transaction_service

    @property
    def metrics(self) -> WalletMetrics | None:
        """Get the wallet metrics (None if disabled)."""
        return self._metrics

    @property
    def task_manager(self) -> TaskManager | None:
        """Get the task manager (None if not enabled)."""
        return self._task_manager

    @property
    def notification_service(self) -> NotificationService | None:
        """Get the notification service (None if not enabled)."""
        return self._notifications

    async def health_check(self) -> dict[str, str]:
        """Check health status of all engine components.

        Returns:
            Dictionary with component statuses ('ok', 'error',
            'not_initialized'; the ledger may also report 'not_connected' or
            'wrong_chain').
        """
        status = {
            "engine": "ok" if self._initialized else "not_initialized",
            "datastore": "unknown",
            "ledger": "unknown",
        }

        if self._initialized:
            if self._datastore and self._datastore.is_open:
                status["datastore"] = "ok"
            else:
                status["datastore"] = "error"

            if self._ledger_client is not None:
                status["ledger"] = await self._ledger_health(self._ledger_client)
            elif self._ledger is not None:
                status["ledger"] = "ok"
            else:
                status["ledger"] = "not_connected"

        return status

    async def _ledger_health(self, client: LedgerClient) -> str:
        if not client.is_connected:
            return "not_connected"
        try:
            chain_id = await client.chain_id()
        except WalletError as exc:
            logger.warning("Ledger health check failed: %s", exc.message)
            return "error"
        if chain_id != self._config.ledger.chain_id:
            logger.warning(
                "Ledger reports chain %d, configured chain is %d",
                chain_id,
                self._config.ledger.chain_id,
            )
            return "wrong_chain"
        return "ok"
