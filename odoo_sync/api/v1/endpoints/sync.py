"""
Endpoints de consulta del estado de sincronizacion Odoo -> PostgreSQL.

Solo lectura: el sync se ejecuta por CLI (cron), nunca desde la API.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from odoo_sync.application.dto.sync_dto import (
    CheckpointListResponseDTO,
    SyncRunDTO,
    SyncRunListResponseDTO,
)
from odoo_sync.application.use_cases.sync_status_use_cases import MAX_RUNS_LIMIT, SyncStatusUseCases
from odoo_sync.api.v1.dependencies.use_case_deps import get_sync_status_use_cases
from odoo_sync.shared.constants.sync_constants import RunStatus


router = APIRouter(prefix="/sync", tags=["Sync"])


@router.get(
    "/state",
    response_model=CheckpointListResponseDTO,
    summary="Checkpoints por modelo"
)
def list_sync_state(
    use_cases: SyncStatusUseCases = Depends(get_sync_status_use_cases)
) -> CheckpointListResponseDTO:
    """
    Lista el checkpoint confirmado de cada modelo sincronizado.
    """
    return use_cases.list_checkpoints()


@router.get(
    "/runs",
    response_model=SyncRunListResponseDTO,
    summary="Listar corridas de sincronizacion"
)
def list_sync_runs(
    model: Optional[str] = Query(None, description="Filtrar por modelo Odoo"),
    run_status: Optional[RunStatus] = Query(None, alias="status", description="running | success | failed"),
    limit: int = Query(50, ge=1, le=MAX_RUNS_LIMIT),
    use_cases: SyncStatusUseCases = Depends(get_sync_status_use_cases)
) -> SyncRunListResponseDTO:
    """
    Corridas mas recientes primero.

    Args:
        model: Modelo Odoo (opcional)
        run_status: Estado de la corrida (opcional)
        limit: Maximo de corridas a retornar
        use_cases: Casos de uso (inyectado)
    """
    return use_cases.list_runs(model=model, status=run_status, limit=limit)


@router.get(
    "/runs/{run_id}",
    response_model=SyncRunDTO,
    summary="Obtener una corrida por ID"
)
def get_sync_run(
    run_id: str,
    use_cases: SyncStatusUseCases = Depends(get_sync_status_use_cases)
) -> SyncRunDTO:
    return use_cases.get_run(run_id)
