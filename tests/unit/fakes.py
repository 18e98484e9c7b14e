"""
Dobles en memoria para probar el orquestador sin Odoo ni PostgreSQL.

- FakeOdoo evalua el arbol de filtros y ordena por "cursor asc, id asc".
- FakeDatabase / FakeUnitOfWork aplican las escrituras solo en commit.
- Los repositorios fake encolan sus escrituras en la unidad de trabajo.
"""
from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from odoo_sync.domain.entities.filters import And, Comparison, Filter, Not, Or
from odoo_sync.domain.entities.sync_state import Checkpoint, CursorPosition, RunCounters, SyncRun, parse_record_id
from odoo_sync.domain.repositories.sync_repository import (
    IRawRecordRepository,
    IRecordSource,
    ISyncStateRepository,
    ITransactionalStore,
    SyncLock,
)
from odoo_sync.shared.constants.sync_constants import ERROR_MESSAGE_MAX_LENGTH, RunStatus
from odoo_sync.shared.exceptions.sync import SyncStoreException
from odoo_sync.shared.utils.datetime_utils import parse_odoo_datetime, utc_now


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _sort_id(record: Dict[str, Any]) -> int:
    value = record.get("id")
    return value if isinstance(value, int) else -1


def _comparable(record_value: Any, filter_value: Any) -> Any:
    if isinstance(filter_value, datetime):
        return parse_odoo_datetime(record_value)
    return record_value


def evaluate(node: Filter, record: Dict[str, Any]) -> bool:
    if isinstance(node, And):
        return all(evaluate(op, record) for op in node.operands)
    if isinstance(node, Or):
        return any(evaluate(op, record) for op in node.operands)
    if isinstance(node, Not):
        return not evaluate(node.operand, record)

    assert isinstance(node, Comparison)
    left = _comparable(record.get(node.field), node.value)
    right = node.value
    op = node.operator
    if op == "=":
        return left == right
    if op == "!=":
        return left != right
    if op == "in":
        return left in right
    if op == "not in":
        return left not in right
    if left is None:
        return False
    if op == ">":
        return left > right
    if op == ">=":
        return left >= right
    if op == "<":
        return left < right
    if op == "<=":
        return left <= right
    raise NotImplementedError(f"Operador no soportado por FakeOdoo: {op}")


class FakeOdoo(IRecordSource):
    """
    Fuente en memoria. `failures` mapea numero de llamada (1-indexed) a la
    excepcion a lanzar en esa llamada.
    """

    def __init__(self, records: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> None:
        self.records: Dict[str, List[Dict[str, Any]]] = records or {}
        self.calls: List[Dict[str, Any]] = []
        self.failures: Dict[int, Exception] = {}
        self.ignore_domain = False

    def search_read(self, model, domain, fields, order, limit):
        self.calls.append(
            {"model": model, "domain": domain, "fields": list(fields), "order": order, "limit": limit}
        )
        error = self.failures.get(len(self.calls))
        if error is not None:
            raise error

        cursor_field = order.split(",")[0].split()[0]
        rows = self.records.get(model, [])
        if not self.ignore_domain:
            rows = [r for r in rows if evaluate(domain, r)]
        rows = sorted(rows, key=lambda r: (parse_odoo_datetime(r.get(cursor_field)) or _EPOCH, _sort_id(r)))
        return [{k: r.get(k) for k in fields} for r in rows[:limit]]


class FakeUnitOfWork:
    def __init__(self) -> None:
        self.staged: List[Callable[[], None]] = []

    def stage(self, op: Callable[[], None]) -> None:
        self.staged.append(op)


class FakeDatabase(ITransactionalStore):
    """
    Aplica las operaciones encoladas solo si el bloque termina sin error.
    `fail_on_commit` hace fallar el commit numero N (1-indexed).
    """

    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0
        self.fail_on_commit: Optional[int] = None

    @contextmanager
    def unit_of_work(self):
        uow = FakeUnitOfWork()
        try:
            yield uow
        except Exception:
            self.rollbacks += 1
            raise
        if self.fail_on_commit == self.commits + 1:
            self.rollbacks += 1
            raise SyncStoreException("Transacción revertida: could not serialize access")
        for op in uow.staged:
            op()
        self.commits += 1


class FakeRawRecordRepository(IRawRecordRepository):
    def __init__(self) -> None:
        self.rows: Dict[tuple, Dict[str, Any]] = {}
        self.upsert_count = 0

    def upsert_batch(self, uow, model, records, run_id):
        values = [(parse_record_id(r, model), dict(r)) for r in records]

        def apply() -> None:
            for odoo_id, payload in values:
                self.rows[(model, odoo_id)] = {"payload": payload, "run_id": run_id}
            self.upsert_count += len(values)

        uow.stage(apply)
        return len(values)

    def payloads(self, model: str) -> Dict[int, Dict[str, Any]]:
        return {k[1]: v["payload"] for k, v in self.rows.items() if k[0] == model}


class FakeSyncStateRepository(ISyncStateRepository):
    def __init__(self) -> None:
        self.checkpoints: Dict[str, Checkpoint] = {}
        self.runs: Dict[str, SyncRun] = {}
        self.checkpoint_history: List[CursorPosition] = []
        self.fail_finish = False

    def get_checkpoint(self, model):
        return self.checkpoints.get(model)

    def advance_checkpoint(self, uow, model, cursor_field, position):
        def apply() -> None:
            previous = self.checkpoints.get(model)
            self.checkpoints[model] = Checkpoint(
                model=model,
                cursor_field=cursor_field,
                cursor_value=position.value,
                cursor_id=position.record_id,
                last_success_run_id=previous.last_success_run_id if previous else None,
                updated_at=utc_now(),
            )
            self.checkpoint_history.append(position)

        uow.stage(apply)

    def start_run(self, model, run_id):
        self.runs[run_id] = SyncRun(run_id=run_id, model=model, status=RunStatus.RUNNING, started_at=utc_now())

    def record_progress(self, uow, run_id, counters: RunCounters):
        def apply() -> None:
            run = self.runs[run_id]
            run.records_read += counters.records_read
            run.records_upserted += counters.records_upserted
            run.pages_processed += counters.pages_processed

        uow.stage(apply)

    def finish_run(self, run_id, status, error=None):
        if self.fail_finish:
            raise SyncStoreException("Error de PostgreSQL: connection lost")
        run = self.runs[run_id]
        if run.status != RunStatus.RUNNING:
            return
        run.status = status
        run.finished_at = utc_now()
        run.error_message = error[:ERROR_MESSAGE_MAX_LENGTH] if error else None

    def mark_last_successful_run(self, model, cursor_field, run_id):
        previous = self.checkpoints.get(model)
        if previous is None:
            self.checkpoints[model] = Checkpoint(model=model, cursor_field=cursor_field, last_success_run_id=run_id)
            return
        self.checkpoints[model] = Checkpoint(
            model=model,
            cursor_field=previous.cursor_field,
            cursor_value=previous.cursor_value,
            cursor_id=previous.cursor_id,
            last_success_run_id=run_id,
            updated_at=utc_now(),
        )

    def list_checkpoints(self):
        return [self.checkpoints[k] for k in sorted(self.checkpoints)]

    def list_runs(self, model=None, status=None, limit=50):
        runs = [r for r in self.runs.values() if (model is None or r.model == model)]
        if status is not None:
            runs = [r for r in runs if r.status == status]
        return list(reversed(runs))[:limit]

    def get_run(self, run_id):
        return self.runs.get(run_id)

    def runs_for(self, model: str) -> List[SyncRun]:
        return [r for r in self.runs.values() if r.model == model]


class FakeLock(SyncLock):
    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.acquired = False
        self.released = False

    def try_acquire(self) -> bool:
        self.acquired = self.available
        return self.available

    def release(self) -> None:
        self.released = True


def make_records(rows: Sequence[tuple]) -> List[Dict[str, Any]]:
    """[(id, write_date, name), ...] -> registros estilo Odoo."""
    return [
        {"id": record_id, "write_date": write_date, "create_date": write_date, "name": name}
        for record_id, write_date, name in rows
    ]
