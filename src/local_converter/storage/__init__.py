"""Local stores for settings, history and artifacts."""

from local_converter.storage.ledger import HistoryLedger
from local_converter.storage.settings import DEFAULT_SETTINGS, SettingsStore
from local_converter.storage.vault import ArtifactVault, format_file_size

__all__ = [
    "ArtifactVault",
    "DEFAULT_SETTINGS",
    "HistoryLedger",
    "SettingsStore",
    "format_file_size",
]
