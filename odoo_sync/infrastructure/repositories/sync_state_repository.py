"""
Repositorio Postgres (psycopg) para:
- checkpoint por modelo (odoo_sync_state)
- libro de corridas (odoo_sync_runs)

`advance_checkpoint` y `record_progress` se ejecutan dentro de la unidad de
trabajo de la pagina (junto al UPSERT de registros). El resto del bookkeeping
(inicio/fin de corrida, ultima corrida exitosa) usa conexiones cortas propias.
"""

from __future__ import annotations

from typing import Any, List, Optional

from odoo_sync.domain.entities.sync_state import Checkpoint, CursorPosition, RunCounters, SyncRun
from odoo_sync.domain.repositories.sync_repository import ISyncStateRepository
from odoo_sync.infrastructure.database.session import PostgresDatabase, UnitOfWork
from odoo_sync.shared.constants.sync_constants import (
    ERROR_MESSAGE_MAX_LENGTH,
    RunStatus,
    SYNC_RUNS_TABLE,
    SYNC_STATE_TABLE,
)
from odoo_sync.shared.utils.datetime_utils import ensure_utc

_STATE_COLUMNS = "model, cursor_field, cursor_value, cursor_id, last_success_run_id, updated_at"
_RUN_COLUMNS = (
    "run_id, model, status, started_at, finished_at, "
    "records_read, records_upserted, pages_processed, error_message"
)


def _row_to_checkpoint(row: dict[str, Any]) -> Checkpoint:
    return Checkpoint(
        model=row["model"],
        cursor_field=row["cursor_field"],
        cursor_value=ensure_utc(row["cursor_value"]) if row["cursor_value"] else None,
        cursor_id=row["cursor_id"],
        last_success_run_id=str(row["last_success_run_id"]) if row["last_success_run_id"] else None,
        updated_at=ensure_utc(row["updated_at"]) if row["updated_at"] else None,
    )


def _row_to_run(row: dict[str, Any]) -> SyncRun:
    return SyncRun(
        run_id=str(row["run_id"]),
        model=row["model"],
        status=RunStatus(row["status"]),
        started_at=row["started_at"],
        finished_at=row["finished_at"],
        records_read=row["records_read"],
        records_upserted=row["records_upserted"],
        pages_processed=row["pages_processed"],
        error_message=row["error_message"],
    )


class SyncStateRepository(ISyncStateRepository):
    def __init__(self, database: PostgresDatabase) -> None:
        self._db = database

    # ------------------------------------------------------------------
    # Checkpoints
    # ------------------------------------------------------------------

    def get_checkpoint(self, model: str) -> Optional[Checkpoint]:
        with self._db.session() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT {_STATE_COLUMNS} FROM {SYNC_STATE_TABLE} WHERE model = %s",
                    (model,),
                )
                row = cur.fetchone()
        return _row_to_checkpoint(row) if row else None

    def advance_checkpoint(
        self,
        uow: UnitOfWork,
        model: str,
        cursor_field: str,
        position: CursorPosition,
    ) -> None:
        with uow.cursor() as cur:
            cur.execute(
                f"""
                INSERT INTO {SYNC_STATE_TABLE} (
                    model,
                    cursor_field,
                    cursor_value,
                    cursor_id,
                    updated_at
                )
                VALUES (%s, %s, %s, %s, NOW())
                ON CONFLICT (model)
                DO UPDATE SET
                    cursor_field = EXCLUDED.cursor_field,
                    cursor_value = EXCLUDED.cursor_value,
                    cursor_id = EXCLUDED.cursor_id,
                    updated_at = NOW()
                """,
                (model, cursor_field, ensure_utc(position.value), position.record_id),
            )

    def mark_last_successful_run(self, model: str, cursor_field: str, run_id: str) -> None:
        with self._db.session() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    INSERT INTO {SYNC_STATE_TABLE} (
                        model,
                        cursor_field,
                        last_success_run_id,
                        updated_at
                    )
                    VALUES (%s, %s, %s, NOW())
                    ON CONFLICT (model)
                    DO UPDATE SET
                        last_success_run_id = EXCLUDED.last_success_run_id,
                        updated_at = NOW()
                    """,
                    (model, cursor_field, run_id),
                )

    def list_checkpoints(self) -> List[Checkpoint]:
        with self._db.session() as conn:
            with conn.cursor() as cur:
                cur.execute(f"SELECT {_STATE_COLUMNS} FROM {SYNC_STATE_TABLE} ORDER BY model")
                rows = cur.fetchall()
        return [_row_to_checkpoint(r) for r in rows]

    # ------------------------------------------------------------------
    # Corridas
    # ------------------------------------------------------------------

    def start_run(self, model: str, run_id: str) -> None:
        with self._db.session() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"INSERT INTO {SYNC_RUNS_TABLE} (run_id, model, status) VALUES (%s, %s, %s)",
                    (run_id, model, RunStatus.RUNNING.value),
                )

    def record_progress(self, uow: UnitOfWork, run_id: str, counters: RunCounters) -> None:
        with uow.cursor() as cur:
            cur.execute(
                f"""
                UPDATE {SYNC_RUNS_TABLE}
                SET
                    records_read = records_read + %s,
                    records_upserted = records_upserted + %s,
                    pages_processed = pages_processed + %s
                WHERE run_id = %s
                """,
                (
                    counters.records_read,
                    counters.records_upserted,
                    counters.pages_processed,
                    run_id,
                ),
            )

    def finish_run(self, run_id: str, status: RunStatus, error: Optional[str] = None) -> None:
        """
        Cierra la corrida. Solo actualiza corridas en estado 'running', de modo
        que una corrida ya finalizada no cambia de estado.
        """
        if status == RunStatus.RUNNING:
            raise ValueError("finish_run requiere un estado final (success/failed)")

        message = error[:ERROR_MESSAGE_MAX_LENGTH] if error else None
        with self._db.session() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    UPDATE {SYNC_RUNS_TABLE}
                    SET
                        status = %s,
                        finished_at = NOW(),
                        error_message = %s
                    WHERE run_id = %s
                      AND status = %s
                    """,
                    (status.value, message, run_id, RunStatus.RUNNING.value),
                )

    def list_runs(
        self,
        model: Optional[str] = None,
        status: Optional[RunStatus] = None,
        limit: int = 50,
    ) -> List[SyncRun]:
        clauses: list[str] = []
        params: list[Any] = []
        if model:
            clauses.append("model = %s")
            params.append(model)
        if status:
            clauses.append("status = %s")
            params.append(RunStatus(status).value)
        where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(limit)

        with self._db.session() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {_RUN_COLUMNS}
                    FROM {SYNC_RUNS_TABLE}
                    {where_sql}
                    ORDER BY started_at DESC
                    LIMIT %s
                    """,
                    tuple(params),
                )
                rows = cur.fetchall()
        return [_row_to_run(r) for r in rows]

    def get_run(self, run_id: str) -> Optional[SyncRun]:
        with self._db.session() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT {_RUN_COLUMNS} FROM {SYNC_RUNS_TABLE} WHERE run_id = %s",
                    (run_id,),
                )
                row = cur.fetchone()
        return _row_to_run(row) if row else None
