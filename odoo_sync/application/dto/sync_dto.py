"""
DTOs para exponer el estado del sync (checkpoints y corridas) por la API REST.
"""
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from odoo_sync.shared.constants.sync_constants import RunStatus


class CheckpointDTO(BaseModel):
    """Checkpoint confirmado de un modelo."""

    model: str = Field(..., description="Modelo Odoo, p.ej. res.partner")
    cursor_field: str = Field(..., description="Campo usado como cursor")
    cursor_value: Optional[datetime] = Field(None, description="Ultimo valor de cursor confirmado")
    cursor_id: Optional[int] = Field(None, description="Id de desempate del ultimo registro confirmado")
    last_success_run_id: Optional[str] = Field(None, description="Ultima corrida exitosa")
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CheckpointListResponseDTO(BaseModel):
    items: List[CheckpointDTO] = Field(default_factory=list)
    total: int = 0


class SyncRunDTO(BaseModel):
    """
    Corrida de sincronizacion de un modelo.

    Los contadores reflejan solo paginas confirmadas.
    """

    run_id: str
    model: str
    status: RunStatus
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    records_read: int = 0
    records_upserted: int = 0
    pages_processed: int = 0
    error_message: Optional[str] = None

    class Config:
        from_attributes = True


class SyncRunListResponseDTO(BaseModel):
    items: List[SyncRunDTO] = Field(default_factory=list)
    total: int = 0
