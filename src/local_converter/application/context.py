"""Application context owning the shared stores."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from local_converter.application.orchestrator import ConversionOrchestrator, ProgressCallback
from local_converter.application.ports import KeyValueStore
from local_converter.backends.registry import BackendRegistry, create_default_registry
from local_converter.config import AppConfig
from local_converter.infrastructure.kv_store import FileKeyValueStore
from local_converter.storage.ledger import HistoryLedger
from local_converter.storage.settings import SettingsStore
from local_converter.storage.vault import ArtifactVault

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContext:
    """One instance of each store per running application.

    Orchestrators built from the same context share the stores; they are
    passed around by reference, never looked up globally.
    """

    store: KeyValueStore
    settings: SettingsStore
    ledger: HistoryLedger
    vault: ArtifactVault
    backends: BackendRegistry

    def orchestrator(self, progress: ProgressCallback | None = None) -> ConversionOrchestrator:
        return ConversionOrchestrator(
            self.settings,
            self.ledger,
            self.vault,
            self.backends,
            progress=progress,
        )

    def clear_all(self) -> None:
        """Remove history, artifacts and saved settings."""
        self.ledger.clear()
        self.vault.clear()
        self.settings.reset()
        logger.warning("all local data cleared")


def build_context(
    store: KeyValueStore,
    backends: BackendRegistry | None = None,
) -> AppContext:
    """Wire the stores over ``store``."""
    settings = SettingsStore(store)
    vault = ArtifactVault(store)
    ledger = HistoryLedger(store, settings, vault)
    return AppContext(
        store=store,
        settings=settings,
        ledger=ledger,
        vault=vault,
        backends=backends if backends is not None else create_default_registry(),
    )


def open_context(config: AppConfig | None = None) -> AppContext:
    """Open the on-disk stores described by ``config`` (default: environment)."""
    config = config or AppConfig.from_env()
    store = FileKeyValueStore(config.data_dir, quota_bytes=config.storage_quota_bytes)
    logger.info("using data directory %s", config.data_dir)
    return build_context(store)
