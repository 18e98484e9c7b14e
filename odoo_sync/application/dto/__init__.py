"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .sync_dto import (
    CheckpointDTO,
    CheckpointListResponseDTO,
    SyncRunDTO,
    SyncRunListResponseDTO,
)

__all__ = [
    "CheckpointDTO",
    "CheckpointListResponseDTO",
    "SyncRunDTO",
    "SyncRunListResponseDTO",
]
