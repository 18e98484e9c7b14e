"""
Modelos de base de datos (ORM) del contrato de persistencia.

El sincronizador escribe con SQL explicito (psycopg); estos modelos existen
para que Alembic conozca el esquema y para documentarlo en un solo lugar.
Deben mantenerse alineados con `schema.sql`.
"""
from sqlalchemy import BigInteger, CheckConstraint, Column, DateTime, Index, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.sql import func

from odoo_sync.infrastructure.database.session import Base
from odoo_sync.shared.constants.sync_constants import (
    DEFAULT_CURSOR_FIELD,
    RAW_RECORDS_TABLE,
    SYNC_RUNS_TABLE,
    SYNC_STATE_TABLE,
)


class OdooRawRecordModel(Base):
    """
    Copia cruda de un registro Odoo (ultima version vista, sin historial).
    """

    __tablename__ = RAW_RECORDS_TABLE

    model = Column(Text, primary_key=True)
    odoo_id = Column(BigInteger, primary_key=True)
    write_date = Column(DateTime(timezone=True), nullable=True)
    create_date = Column(DateTime(timezone=True), nullable=True)
    payload = Column(JSONB, nullable=False)
    synced_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    run_id = Column(UUID(as_uuid=False), nullable=True)

    __table_args__ = (
        Index("idx_odoo_raw_records_model_write_date", "model", "write_date"),
        Index("idx_odoo_raw_records_payload_gin", "payload", postgresql_using="gin"),
    )

    def __repr__(self):
        return f"<OdooRawRecord(model={self.model}, odoo_id={self.odoo_id})>"


class OdooSyncStateModel(Base):
    """Checkpoint por modelo. Nunca se borra."""

    __tablename__ = SYNC_STATE_TABLE

    model = Column(Text, primary_key=True)
    cursor_field = Column(Text, nullable=False, server_default=DEFAULT_CURSOR_FIELD)
    cursor_value = Column(DateTime(timezone=True), nullable=True)
    cursor_id = Column(BigInteger, nullable=True)
    last_success_run_id = Column(UUID(as_uuid=False), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<OdooSyncState(model={self.model}, cursor=({self.cursor_value}, {self.cursor_id}))>"


class OdooSyncRunModel(Base):
    """Libro de corridas: una fila por (modelo, invocacion)."""

    __tablename__ = SYNC_RUNS_TABLE

    run_id = Column(UUID(as_uuid=False), primary_key=True)
    model = Column(Text, nullable=False)
    status = Column(Text, nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    finished_at = Column(DateTime(timezone=True), nullable=True)
    records_read = Column(BigInteger, nullable=False, server_default="0")
    records_upserted = Column(BigInteger, nullable=False, server_default="0")
    pages_processed = Column(BigInteger, nullable=False, server_default="0")
    error_message = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('running', 'success', 'failed')",
            name="ck_odoo_sync_runs_status",
        ),
    )

    def __repr__(self):
        return f"<OdooSyncRun(run_id={self.run_id}, model={self.model}, status={self.status})>"


Index(
    "idx_odoo_sync_runs_model_started_at",
    OdooSyncRunModel.model,
    OdooSyncRunModel.started_at.desc(),
)
