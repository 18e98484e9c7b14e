"""
Lock global de un solo ejecutor.

Motivacion:
- El scheduler externo (cron) puede lanzar una invocacion mientras la
  anterior sigue corriendo.
- La adquisicion es no bloqueante: si el lock esta ocupado el proceso sale
  sin hacer nada (exit 0), en lugar de encolarse.

Estrategias:
- advisory: pg_try_advisory_lock sobre una conexion dedicada que vive
  durante toda la corrida (el lock es de sesion).
- none: sin exclusion (p.ej. detras de PgBouncer en modo transaccion,
  donde los locks de sesion no son fiables).
"""

from __future__ import annotations

from typing import Optional

import psycopg
from loguru import logger

from odoo_sync.domain.repositories.sync_repository import SyncLock
from odoo_sync.infrastructure.database.session import PostgresDatabase
from odoo_sync.shared.constants.sync_constants import GLOBAL_ADVISORY_LOCK_ID, LockStrategy
from odoo_sync.shared.exceptions.sync import SyncStoreException

_log = logger.bind(component="sync-lock")


class NoopSyncLock(SyncLock):
    def try_acquire(self) -> bool:
        _log.info("Lock omitido por la estrategia configurada (lock_strategy=none)")
        return True

    def release(self) -> None:
        return None


class PostgresAdvisoryLock(SyncLock):
    """
    Evita ejecuciones simultáneas del mismo job.
    """

    def __init__(self, database: PostgresDatabase, lock_id: int = GLOBAL_ADVISORY_LOCK_ID) -> None:
        self._database = database
        self._lock_id = lock_id
        self._conn: Optional[psycopg.Connection] = None
        self._acquired = False

    @property
    def acquired(self) -> bool:
        return self._acquired

    def try_acquire(self) -> bool:
        if self._acquired:
            return True

        conn = self._database.connect(autocommit=True)
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT pg_try_advisory_lock(%s) AS locked", (self._lock_id,))
                row = cur.fetchone()
        except psycopg.Error as e:
            conn.close()
            raise SyncStoreException(f"No se pudo consultar el advisory lock: {e}") from e

        if not (row and row.get("locked")):
            conn.close()
            _log.warning(f"Otro proceso tiene el advisory lock {self._lock_id}; saliendo.")
            return False

        self._conn = conn
        self._acquired = True
        _log.info(f"Advisory lock {self._lock_id} adquirido")
        return True

    def release(self) -> None:
        """Libera el lock y cierra la conexion dedicada (seguro de llamar varias veces)."""
        conn, self._conn = self._conn, None
        if conn is None:
            return
        try:
            if self._acquired:
                with conn.cursor() as cur:
                    cur.execute("SELECT pg_advisory_unlock(%s)", (self._lock_id,))
                _log.info(f"Advisory lock {self._lock_id} liberado")
        except psycopg.Error as e:
            # Al cerrar la conexion Postgres libera igualmente los locks de sesion
            _log.warning(f"No se pudo liberar el advisory lock explicitamente: {e}")
        finally:
            self._acquired = False
            conn.close()


def build_sync_lock(strategy: LockStrategy, database: PostgresDatabase) -> SyncLock:
    if strategy == LockStrategy.ADVISORY:
        return PostgresAdvisoryLock(database)
    return NoopSyncLock()
