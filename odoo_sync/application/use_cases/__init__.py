"""
Casos de uso de la aplicacion.
"""
from odoo_sync.application.use_cases.sync_status_use_cases import SyncStatusUseCases

__all__ = ["SyncStatusUseCases"]
