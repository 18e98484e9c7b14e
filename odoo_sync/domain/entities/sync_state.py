"""
Entidades de dominio del sincronizador: posicion de cursor, checkpoint y corridas.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from odoo_sync.shared.constants.sync_constants import ODOO_ID_FIELD, RunStatus
from odoo_sync.shared.exceptions.sync import RecordValidationException


@dataclass(frozen=True, order=True)
class CursorPosition:
    """
    Posicion compuesta (cursor_value, record_id).

    El orden de la dataclass es lexicografico: primero el valor del cursor
    y, ante empate (mismo write_date), el id de Odoo.
    """

    value: datetime
    record_id: int


@dataclass(frozen=True)
class Checkpoint:
    """Estado persistido por modelo (una fila en odoo_sync_state)."""

    model: str
    cursor_field: str
    cursor_value: Optional[datetime] = None
    cursor_id: Optional[int] = None
    last_success_run_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def position(self) -> Optional[CursorPosition]:
        """Posicion confirmada, o None si el modelo nunca confirmo una pagina."""
        if self.cursor_value is None:
            return None
        return CursorPosition(self.cursor_value, self.cursor_id or 0)


@dataclass(frozen=True)
class RunCounters:
    """Deltas aditivos de una pagina (o acumulado de una corrida)."""

    records_read: int = 0
    records_upserted: int = 0
    pages_processed: int = 0

    def __add__(self, other: "RunCounters") -> "RunCounters":
        return RunCounters(
            records_read=self.records_read + other.records_read,
            records_upserted=self.records_upserted + other.records_upserted,
            pages_processed=self.pages_processed + other.pages_processed,
        )


@dataclass
class SyncRun:
    """
    Registro de auditoria de una corrida (odoo_sync_runs).

    running -> success | failed; los estados finales no cambian.
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

    @property
    def is_finished(self) -> bool:
        return self.status in (RunStatus.SUCCESS, RunStatus.FAILED)


def parse_record_id(record: Any, model: str) -> int:
    """
    Extrae el id entero de un registro Odoo.

    Acepta int o string de digitos; cualquier otra cosa invalida el registro.
    """
    if not isinstance(record, dict):
        raise RecordValidationException(model, f"Registro de '{model}' no es un objeto: {record!r}")

    value = record.get(ODOO_ID_FIELD)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    raise RecordValidationException(
        model, f"Registro de '{model}' sin id entero válido: {value!r}", record_id=value
    )
