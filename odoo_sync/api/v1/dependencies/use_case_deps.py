"""
Dependencias para inyeccion de casos de uso.
"""
from fastapi import Depends

from odoo_sync.application.use_cases.sync_status_use_cases import SyncStatusUseCases
from odoo_sync.domain.repositories.sync_repository import ISyncStateRepository
from odoo_sync.api.v1.dependencies.repository_deps import get_sync_state_repository


def get_sync_status_use_cases(
    repository: ISyncStateRepository = Depends(get_sync_state_repository)
) -> SyncStatusUseCases:
    """
    Dependencia para obtener los casos de uso de consulta del sync.

    Returns:
        SyncStatusUseCases: Instancia de casos de uso
    """
    return SyncStatusUseCases(repository)
