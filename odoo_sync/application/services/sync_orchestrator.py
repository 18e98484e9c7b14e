"""
Orquestador del sync incremental Odoo -> Postgres.

Diseño (resumen):
- Lock global no bloqueante: si otra instancia corre, se sale sin hacer nada.
- Modelos en el orden configurado; la falla de uno no aborta a los demas.
- Por modelo: checkpoint -> ventana con solapamiento -> paginas keyset.
- Cada pagina es una unidad de trabajo: UPSERT + avance de checkpoint +
  contadores de la corrida se confirman juntos o no se confirma nada.
- Inicio/fin de corrida y "ultima corrida exitosa" van fuera de la
  transaccion de pagina, para que el libro refleje fallas aun con rollback.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from loguru import logger

from odoo_sync.application.services.incremental_window import (
    build_order,
    build_page_filter,
    compute_window_start,
    max_cursor_position,
)
from odoo_sync.core.sync_config import ModelSyncConfig
from odoo_sync.domain.entities.sync_state import CursorPosition, RunCounters
from odoo_sync.domain.repositories.sync_repository import (
    IRawRecordRepository,
    IRecordSource,
    ISyncStateRepository,
    ITransactionalStore,
    SyncLock,
)
from odoo_sync.shared.constants.sync_constants import RunStatus
from odoo_sync.shared.exceptions.sync import CursorRegressionException

_log = logger.bind(component="sync-orchestrator")


@dataclass(frozen=True)
class EntitySyncResult:
    model: str
    run_id: str
    status: RunStatus
    counters: RunCounters = RunCounters()
    last_position: Optional[CursorPosition] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.SUCCESS


@dataclass
class SyncSummary:
    """Resultado de una invocacion completa."""

    lock_acquired: bool = True
    results: List[EntitySyncResult] = field(default_factory=list)

    @property
    def failed_entities(self) -> List[str]:
        return [r.model for r in self.results if not r.succeeded]

    @property
    def succeeded(self) -> bool:
        return not self.failed_entities

    @property
    def exit_code(self) -> int:
        # Lock ocupado no es un error: la otra instancia hace el trabajo
        return 0 if self.succeeded else 1


class SyncOrchestrator:
    def __init__(
        self,
        *,
        client: IRecordSource,
        database: ITransactionalStore,
        raw_records: IRawRecordRepository,
        sync_state: ISyncStateRepository,
        entities: Sequence[ModelSyncConfig],
        lock: SyncLock,
    ) -> None:
        self._client = client
        self._database = database
        self._raw_records = raw_records
        self._sync_state = sync_state
        self._entities = list(entities)
        self._lock = lock

    def run(self) -> SyncSummary:
        """
        Sincroniza todos los modelos configurados bajo el lock global.

        El lock se libera siempre, incluso si el procesamiento lanza.
        """
        if not self._lock.try_acquire():
            _log.warning("Sync ya está corriendo (lock ocupado). Saliendo sin procesar.")
            return SyncSummary(lock_acquired=False)

        summary = SyncSummary()
        try:
            for entity in self._entities:
                summary.results.append(self.sync_entity(entity))
        finally:
            self._lock.release()

        if summary.failed_entities:
            _log.error(f"Sync finalizado con errores en: {', '.join(summary.failed_entities)}")
        else:
            _log.success(f"Sync finalizado OK ({len(summary.results)} modelos)")
        return summary

    def sync_entity(self, entity: ModelSyncConfig) -> EntitySyncResult:
        """
        Corrida de un modelo. Nunca lanza: las fallas quedan en el libro de
        corridas y en el resultado.
        """
        run_id = str(uuid.uuid4())
        log = _log.bind(model=entity.name, run_id=run_id)

        # Si no se puede abrir la corrida no hay nada que cerrar
        try:
            self._sync_state.start_run(entity.name, run_id)
        except Exception as e:
            log.exception(f"No se pudo registrar el inicio de la corrida de '{entity.name}'")
            return EntitySyncResult(entity.name, run_id, RunStatus.FAILED, error=str(e))

        totals = RunCounters()
        last_position: Optional[CursorPosition] = None
        try:
            totals, last_position = self._sync_pages(entity, run_id, log)
            self._sync_state.mark_last_successful_run(entity.name, entity.cursor_field, run_id)
            self._sync_state.finish_run(run_id, RunStatus.SUCCESS)
        except Exception as e:
            log.exception(f"Sync de '{entity.name}' falló: {e}")
            try:
                self._sync_state.finish_run(run_id, RunStatus.FAILED, error=str(e) or type(e).__name__)
            except Exception:
                log.exception(f"No se pudo marcar la corrida {run_id} como fallida")
            return EntitySyncResult(
                entity.name,
                run_id,
                RunStatus.FAILED,
                counters=totals,
                last_position=last_position,
                error=str(e) or type(e).__name__,
            )

        log.info(
            f"Sync de '{entity.name}' OK: leidos={totals.records_read} "
            f"upserts={totals.records_upserted} paginas={totals.pages_processed}"
        )
        return EntitySyncResult(
            entity.name,
            run_id,
            RunStatus.SUCCESS,
            counters=totals,
            last_position=last_position,
        )

    def _sync_pages(self, entity: ModelSyncConfig, run_id: str, log) -> tuple[RunCounters, Optional[CursorPosition]]:
        checkpoint = self._sync_state.get_checkpoint(entity.name)
        if checkpoint is not None and checkpoint.cursor_field != entity.cursor_field:
            log.warning(
                f"El checkpoint de '{entity.name}' usa cursor '{checkpoint.cursor_field}' "
                f"pero la configuracion usa '{entity.cursor_field}'; se reutiliza el valor guardado."
            )

        window_start = compute_window_start(checkpoint, entity.overlap)
        fields = entity.fetch_fields
        order = build_order(entity.cursor_field)

        log.info(
            f"Sync incremental '{entity.name}' "
            f"(cursor {entity.cursor_field} >= {window_start.isoformat() if window_start else 'inicio'}, "
            f"page_size={entity.page_size})"
        )

        totals = RunCounters()
        continuation: Optional[CursorPosition] = None
        while True:
            domain = build_page_filter(entity, window_start, continuation)
            records = self._client.search_read(entity.name, domain, fields, order, entity.page_size)
            if not records:
                break

            position = max_cursor_position(records, entity)
            if continuation is not None and position <= continuation:
                raise CursorRegressionException(
                    entity.name,
                    f"El cursor de '{entity.name}' no avanzó: {position} <= {continuation}",
                )

            with self._database.unit_of_work() as uow:
                upserted = self._raw_records.upsert_batch(uow, entity.name, records, run_id)
                self._sync_state.advance_checkpoint(uow, entity.name, entity.cursor_field, position)
                page = RunCounters(records_read=len(records), records_upserted=upserted, pages_processed=1)
                self._sync_state.record_progress(uow, run_id, page)

            totals = totals + page
            continuation = position
            log.debug(
                f"Pagina {totals.pages_processed} de '{entity.name}' confirmada: "
                f"{len(records)} registros, cursor=({position.value.isoformat()}, {position.record_id})"
            )

            if len(records) < entity.page_size:
                break

        return totals, continuation
