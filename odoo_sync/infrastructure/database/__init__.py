"""
Configuración de base de datos.

Importa todos los modelos para que se registren con Base
antes de generar/ejecutar migraciones.
"""
from odoo_sync.infrastructure.database.models import (
    OdooRawRecordModel,
    OdooSyncRunModel,
    OdooSyncStateModel,
)
