"""
Servicios de aplicacion.

Algoritmo incremental (funciones puras) y orquestador del sync.
"""
from odoo_sync.application.services.sync_orchestrator import (
    EntitySyncResult,
    SyncOrchestrator,
    SyncSummary,
)

__all__ = [
    "EntitySyncResult",
    "SyncOrchestrator",
    "SyncSummary",
]
