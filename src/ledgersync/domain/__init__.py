"""Domain layer for ledgersync."""

# Services are loaded lazily: database.base imports domain.entities, and the
# services import database.base.
_SERVICES = {
    "AccountService": "ledgersync.domain.account",
    "BusinessService": "ledgersync.domain.business",
    "JournalService": "ledgersync.domain.journal",
    "ReconciliationService": "ledgersync.domain.reconciliation",
    "SyncService": "ledgersync.domain.sync",
    "UsageGate": "ledgersync.domain.usage",
    "normalize_account_type": "ledgersync.domain.account_types",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
