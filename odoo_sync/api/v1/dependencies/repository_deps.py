"""
Dependencias para inyección de repositorios.
"""
from functools import lru_cache

from fastapi import Depends

from odoo_sync.core.config import get_settings
from odoo_sync.infrastructure.database.session import PostgresDatabase
from odoo_sync.infrastructure.repositories.sync_state_repository import SyncStateRepository


@lru_cache(maxsize=1)
def get_database() -> PostgresDatabase:
    """
    Acceso a PostgreSQL para la API (un solo objeto por proceso).

    Usa `Settings.effective_database_url`; la API no lee el YAML del sync.
    """
    return PostgresDatabase(get_settings().effective_database_url)


def get_sync_state_repository(
    database: PostgresDatabase = Depends(get_database)
) -> SyncStateRepository:
    """
    Dependencia para obtener el repositorio de checkpoints y corridas.

    Args:
        database: Acceso a la base de datos

    Returns:
        SyncStateRepository: Repositorio de estado del sync
    """
    return SyncStateRepository(database)
