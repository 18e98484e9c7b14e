"""
Casos de uso de consulta del estado del sync (solo lectura).
"""
import uuid
from typing import Optional

from loguru import logger

from odoo_sync.application.dto.sync_dto import (
    CheckpointDTO,
    CheckpointListResponseDTO,
    SyncRunDTO,
    SyncRunListResponseDTO,
)
from odoo_sync.domain.repositories.sync_repository import ISyncStateRepository
from odoo_sync.shared.constants.sync_constants import RunStatus
from odoo_sync.shared.exceptions.domain import EntityNotFoundException

MAX_RUNS_LIMIT = 500


class SyncStatusUseCases:
    def __init__(self, repository: ISyncStateRepository):
        self.repository = repository

    def list_checkpoints(self) -> CheckpointListResponseDTO:
        checkpoints = self.repository.list_checkpoints()
        items = [CheckpointDTO.model_validate(c) for c in checkpoints]
        return CheckpointListResponseDTO(items=items, total=len(items))

    def list_runs(
        self,
        model: Optional[str] = None,
        status: Optional[RunStatus] = None,
        limit: int = 50,
    ) -> SyncRunListResponseDTO:
        """
        Corridas mas recientes primero, filtrables por modelo y estado.
        """
        limit = max(1, min(limit, MAX_RUNS_LIMIT))
        runs = self.repository.list_runs(model=model, status=status, limit=limit)
        items = [SyncRunDTO.model_validate(r) for r in runs]
        return SyncRunListResponseDTO(items=items, total=len(items))

    def get_run(self, run_id: str) -> SyncRunDTO:
        # Un id que no es UUID no puede existir en la tabla (columna UUID)
        try:
            uuid.UUID(run_id)
        except ValueError:
            logger.debug(f"run_id con formato invalido: {run_id}")
            raise EntityNotFoundException("SyncRun", run_id)

        run = self.repository.get_run(run_id)
        if run is None:
            raise EntityNotFoundException("SyncRun", run_id)
        return SyncRunDTO.model_validate(run)
