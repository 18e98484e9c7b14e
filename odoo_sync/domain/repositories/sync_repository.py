"""
Interfaces (puertos) que usa el orquestador de sincronizacion.
Definen el contrato que debe cumplir cualquier implementación.

Las operaciones de escritura por pagina reciben explicitamente la unidad de
trabajo (`uow`) abierta por `ITransactionalStore.unit_of_work()`; ninguna
implementacion debe depender de una transaccion implicita/ambiental.
"""
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Dict, List, Optional, Sequence

from odoo_sync.domain.entities.filters import Filter
from odoo_sync.domain.entities.sync_state import Checkpoint, CursorPosition, RunCounters, SyncRun
from odoo_sync.shared.constants.sync_constants import RunStatus


class IRecordSource(ABC):
    """Lectura paginada, filtrada y ordenada de un modelo remoto."""

    @abstractmethod
    def search_read(
        self,
        model: str,
        domain: Filter,
        fields: Sequence[str],
        order: str,
        limit: int,
    ) -> List[Dict[str, Any]]:
        """
        Retorna como maximo `limit` registros, ordenados segun `order`.
        """
        pass


class ITransactionalStore(ABC):
    """Fabrica de unidades de trabajo (una transaccion por pagina)."""

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager:
        """
        Abre una transaccion. Commit al salir sin error; rollback completo si
        el bloque lanza una excepcion.
        """
        pass


class IRawRecordRepository(ABC):
    """Sumidero idempotente de registros crudos."""

    @abstractmethod
    def upsert_batch(self, uow: Any, model: str, records: Sequence[Dict[str, Any]], run_id: str) -> int:
        """
        Inserta o sobreescribe los registros por (model, odoo_id).

        Returns:
            int: Cantidad de filas escritas (todo o nada)
        """
        pass


class ISyncStateRepository(ABC):
    """Checkpoints por modelo y libro de corridas."""

    @abstractmethod
    def get_checkpoint(self, model: str) -> Optional[Checkpoint]:
        pass

    @abstractmethod
    def advance_checkpoint(self, uow: Any, model: str, cursor_field: str, position: CursorPosition) -> None:
        pass

    @abstractmethod
    def start_run(self, model: str, run_id: str) -> None:
        pass

    @abstractmethod
    def record_progress(self, uow: Any, run_id: str, counters: RunCounters) -> None:
        """Suma los contadores de la pagina (deltas, no reemplazo)."""
        pass

    @abstractmethod
    def finish_run(self, run_id: str, status: RunStatus, error: Optional[str] = None) -> None:
        pass

    @abstractmethod
    def mark_last_successful_run(self, model: str, cursor_field: str, run_id: str) -> None:
        pass

    @abstractmethod
    def list_checkpoints(self) -> List[Checkpoint]:
        pass

    @abstractmethod
    def list_runs(
        self,
        model: Optional[str] = None,
        status: Optional[RunStatus] = None,
        limit: int = 50,
    ) -> List[SyncRun]:
        pass

    @abstractmethod
    def get_run(self, run_id: str) -> Optional[SyncRun]:
        pass


class SyncLock(ABC):
    """Exclusion de un solo ejecutor: intentar adquirir (sin esperar) y liberar."""

    @abstractmethod
    def try_acquire(self) -> bool:
        pass

    @abstractmethod
    def release(self) -> None:
        pass
