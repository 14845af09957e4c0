"""Domain layer for fincontrol application."""

# Services are loaded lazily: they import the database layer, which itself
# imports fincontrol.domain.entities.
_SERVICES = {
    "TransactionService": "fincontrol.domain.transaction",
    "CategoryService": "fincontrol.domain.category",
    "ResponsibleService": "fincontrol.domain.responsible",
    "StatementImportService": "fincontrol.domain.statement_import",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
