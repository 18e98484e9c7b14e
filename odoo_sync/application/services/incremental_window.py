"""
Funciones puras del algoritmo incremental (sin I/O).

- Ventana: window_start = checkpoint.cursor_value - overlap (sin checkpoint: backfill completo).
- Paginacion keyset sobre (cursor_field, id), estrictamente mayor que la ultima
  posicion vista, para no saltar ni repetir registros con el mismo write_date.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Optional, Sequence

from odoo_sync.core.sync_config import ModelSyncConfig
from odoo_sync.domain.entities.filters import Comparison, Filter, all_of, any_of
from odoo_sync.domain.entities.sync_state import Checkpoint, CursorPosition, parse_record_id
from odoo_sync.shared.constants.sync_constants import ODOO_ID_FIELD
from odoo_sync.shared.exceptions.sync import RecordValidationException
from odoo_sync.shared.utils.datetime_utils import parse_odoo_datetime


def compute_window_start(checkpoint: Optional[Checkpoint], overlap: timedelta) -> Optional[datetime]:
    """Limite inferior de la ventana, o None para sincronizar todo el historial."""
    if checkpoint is None or checkpoint.cursor_value is None:
        return None
    return checkpoint.cursor_value - overlap


def build_order(cursor_field: str) -> str:
    return f"{cursor_field} asc, {ODOO_ID_FIELD} asc"


def build_continuation_filter(cursor_field: str, position: CursorPosition) -> Filter:
    """cursor > v OR (cursor = v AND id > last_id)"""
    return any_of(
        Comparison(cursor_field, ">", position.value),
        all_of(
            Comparison(cursor_field, "=", position.value),
            Comparison(ODOO_ID_FIELD, ">", position.record_id),
        ),
    )


def build_page_filter(
    entity: ModelSyncConfig,
    window_start: Optional[datetime],
    continuation: Optional[CursorPosition],
) -> Filter:
    """
    base AND (cursor >= window_start, si existe) AND (continuacion keyset, desde la 2da pagina).
    """
    parts: list[Filter] = [entity.base_filter]
    if window_start is not None:
        parts.append(Comparison(entity.cursor_field, ">=", window_start))
    if continuation is not None:
        parts.append(build_continuation_filter(entity.cursor_field, continuation))
    return all_of(*parts)


def record_position(record: Any, model: str, cursor_field: str) -> CursorPosition:
    """Posicion (cursor, id) de un registro; falla si falta o es invalida."""
    record_id = parse_record_id(record, model)
    raw_value = record.get(cursor_field)
    value = parse_odoo_datetime(raw_value)
    if value is None:
        raise RecordValidationException(
            model,
            f"Registro {record_id} de '{model}' con cursor '{cursor_field}' inválido: {raw_value!r}",
            record_id=record_id,
        )
    return CursorPosition(value, record_id)


def max_cursor_position(records: Sequence[Any], entity: ModelSyncConfig) -> CursorPosition:
    """
    Maxima posicion lexicografica de la pagina.

    Se recorren todos los registros (no se confia en el orden de la respuesta)
    y cualquier registro invalido rechaza la pagina completa.
    """
    if not records:
        raise ValueError(f"No se puede calcular el cursor maximo de una pagina vacia ({entity.name})")
    return max(record_position(record, entity.name, entity.cursor_field) for record in records)
