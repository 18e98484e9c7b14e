"""
Acceso a PostgreSQL (psycopg v3) y unidad de trabajo por pagina.

- `Base`: metadata SQLAlchemy de las tablas del contrato (la usa Alembic).
- `PostgresDatabase.session()`: conexion corta para lecturas y bookkeeping
  fuera de la transaccion de pagina (commit al salir).
- `PostgresDatabase.unit_of_work()`: una transaccion explicita; el objeto
  `UnitOfWork` se pasa por referencia a cada repositorio que escribe.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

import psycopg
from psycopg.rows import dict_row
from sqlalchemy.orm import declarative_base

from odoo_sync.domain.repositories.sync_repository import ITransactionalStore
from odoo_sync.shared.exceptions.sync import SyncStoreException

# Base para modelos de SQLAlchemy
Base = declarative_base()


class UnitOfWork:
    """
    Transaccion abierta sobre una conexion.

    Los repositorios solo ejecutan sentencias a traves de `cursor()`; el
    commit/rollback lo decide quien abrio la unidad de trabajo.
    """

    def __init__(self, connection: psycopg.Connection) -> None:
        self.connection = connection

    def cursor(self) -> psycopg.Cursor:
        return self.connection.cursor()


class PostgresDatabase(ITransactionalStore):
    def __init__(
        self,
        dsn: str,
        *,
        sslmode: Optional[str] = None,
        connect_timeout: Optional[int] = None,
    ) -> None:
        self._dsn = dsn
        self._connect_kwargs: dict = {}
        if sslmode:
            self._connect_kwargs["sslmode"] = sslmode
        if connect_timeout:
            self._connect_kwargs["connect_timeout"] = connect_timeout

    def connect(self, *, autocommit: bool = False) -> psycopg.Connection:
        """
        Abre conexión. Con autocommit False el caller controla commits.
        """
        try:
            return psycopg.connect(
                self._dsn,
                row_factory=dict_row,
                autocommit=autocommit,
                **self._connect_kwargs,
            )
        except psycopg.OperationalError as e:
            raise SyncStoreException(
                f"No se pudo conectar a PostgreSQL: {e}\n"
                f"Sugerencia: verifica host/puerto del DSN y que Postgres esté corriendo."
            ) from e

    @contextmanager
    def session(self) -> Iterator[psycopg.Connection]:
        """Conexion corta: commit al salir, rollback si el bloque falla."""
        try:
            with self.connect() as conn:
                yield conn
        except psycopg.Error as e:
            raise SyncStoreException(f"Error de PostgreSQL: {e}") from e

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        """
        Transaccion de una pagina. Cualquier excepcion dentro del bloque
        revierte todo; los errores de psycopg se traducen a SyncStoreException.
        """
        try:
            with self.connect() as conn:
                with conn.transaction():
                    yield UnitOfWork(conn)
        except psycopg.Error as e:
            raise SyncStoreException(f"Transacción revertida: {e}") from e
