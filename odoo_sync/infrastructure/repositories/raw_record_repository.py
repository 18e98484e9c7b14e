"""
Repositorio Postgres (psycopg) para la tabla de registros crudos.

UPSERT por (model, odoo_id): si el registro ya existe se sobreescriben
payload y timestamps derivados y se refrescan synced_at / run_id. Re-entregar
el mismo registro (ventana de solapamiento) no tiene otro efecto.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from psycopg.types.json import Jsonb

from odoo_sync.domain.entities.sync_state import parse_record_id
from odoo_sync.domain.repositories.sync_repository import IRawRecordRepository
from odoo_sync.infrastructure.database.session import UnitOfWork
from odoo_sync.shared.constants.sync_constants import RAW_RECORDS_TABLE
from odoo_sync.shared.utils.datetime_utils import parse_odoo_datetime

UPSERT_SQL = f"""
    INSERT INTO {RAW_RECORDS_TABLE} (
        model,
        odoo_id,
        write_date,
        create_date,
        payload,
        run_id
    )
    VALUES (%s, %s, %s, %s, %s, %s)
    ON CONFLICT (model, odoo_id)
    DO UPDATE SET
        write_date = EXCLUDED.write_date,
        create_date = EXCLUDED.create_date,
        payload = EXCLUDED.payload,
        synced_at = NOW(),
        run_id = EXCLUDED.run_id
"""


def normalize_odoo_timestamp(value: Any) -> Optional[datetime]:
    """write_date/create_date de Odoo son strings UTC sin zona (o False si vacios)."""
    return parse_odoo_datetime(value)


class RawRecordRepository(IRawRecordRepository):
    def upsert_batch(
        self,
        uow: UnitOfWork,
        model: str,
        records: Sequence[dict[str, Any]],
        run_id: str,
    ) -> int:
        """
        UPSERT del lote dentro de la unidad de trabajo del caller.

        Todos los registros se validan antes de ejecutar SQL: si uno falla,
        no se escribe ninguno.
        """
        if not records:
            return 0

        values = [
            (
                model,
                parse_record_id(record, model),
                normalize_odoo_timestamp(record.get("write_date")),
                normalize_odoo_timestamp(record.get("create_date")),
                Jsonb(record),
                run_id,
            )
            for record in records
        ]

        with uow.cursor() as cur:
            cur.executemany(UPSERT_SQL, values)

        return len(values)
