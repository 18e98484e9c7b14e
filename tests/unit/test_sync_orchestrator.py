"""
Tests del orquestador incremental con dobles en memoria.

Cubren paginacion keyset con empates, reanudacion tras fallas, solapamiento,
aislamiento de fallas por modelo y el lock global.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from loguru import logger

from fakes import (
    FakeDatabase,
    FakeLock,
    FakeOdoo,
    FakeRawRecordRepository,
    FakeSyncStateRepository,
    make_records,
)
from odoo_sync.application.services.sync_orchestrator import SyncOrchestrator
from odoo_sync.core.sync_config import ModelSyncConfig
from odoo_sync.domain.entities.filters import MATCH_ALL, And, Comparison, Or
from odoo_sync.domain.entities.sync_state import Checkpoint, CursorPosition
from odoo_sync.shared.constants.sync_constants import RunStatus
from odoo_sync.shared.exceptions.sync import OdooRemoteException

T = datetime(2024, 3, 1, 10, 0, 0, tzinfo=timezone.utc)
T_ODOO = "2024-03-01 10:00:00"


def _ts(minutes: int) -> str:
    return (T + timedelta(minutes=minutes)).strftime("%Y-%m-%d %H:%M:%S")


def _entity(name: str = "res.partner", **kwargs) -> ModelSyncConfig:
    params = {"name": name, "fields": ["id", "name", "write_date"], "page_size": 2}
    params.update(kwargs)
    return ModelSyncConfig(**params)


class _Harness:
    def __init__(self, odoo: FakeOdoo, lock: FakeLock | None = None) -> None:
        self.odoo = odoo
        self.database = FakeDatabase()
        self.raw = FakeRawRecordRepository()
        self.state = FakeSyncStateRepository()
        self.lock = lock or FakeLock()

    def orchestrator(self, *entities: ModelSyncConfig) -> SyncOrchestrator:
        return SyncOrchestrator(
            client=self.odoo,
            database=self.database,
            raw_records=self.raw,
            sync_state=self.state,
            entities=entities,
            lock=self.lock,
        )


class TestKeysetPaging:
    """Paginacion por (cursor, id)."""

    def test_identical_timestamps_are_paged_by_id(self) -> None:
        """Tres registros con el mismo write_date y page_size 2: ninguno se pierde ni se repite."""
        odoo = FakeOdoo({"res.partner": make_records([(1, T_ODOO, "a"), (2, T_ODOO, "b"), (3, T_ODOO, "c")])})
        h = _Harness(odoo)

        summary = h.orchestrator(_entity()).run()

        assert summary.exit_code == 0
        result = summary.results[0]
        assert result.status == RunStatus.SUCCESS
        assert h.state.checkpoint_history == [CursorPosition(T, 2), CursorPosition(T, 3)]
        assert sorted(h.raw.payloads("res.partner")) == [1, 2, 3]

        run = h.state.runs[result.run_id]
        assert run.status == RunStatus.SUCCESS
        assert run.records_read == 3
        assert run.records_upserted == 3
        # La pagina corta (1 < 2) termina el loop sin pedir una pagina vacia extra
        assert run.pages_processed == 2
        assert len(odoo.calls) == 2

    def test_continuation_predicate_breaks_ties_with_id(self) -> None:
        odoo = FakeOdoo({"res.partner": make_records([(1, T_ODOO, "a"), (2, T_ODOO, "b"), (3, T_ODOO, "c")])})
        h = _Harness(odoo)

        h.orchestrator(_entity()).run()

        first, second = odoo.calls
        assert first["domain"] == MATCH_ALL
        assert first["order"] == "write_date asc, id asc"
        assert first["limit"] == 2
        assert second["domain"] == Or(
            (
                Comparison("write_date", ">", T),
                And((Comparison("write_date", "=", T), Comparison("id", ">", 2))),
            )
        )

    def test_full_last_page_ends_with_empty_fetch(self) -> None:
        odoo = FakeOdoo({"res.partner": make_records([(i, _ts(i), f"p{i}") for i in range(1, 5)])})
        h = _Harness(odoo)

        result = h.orchestrator(_entity()).run().results[0]

        assert len(odoo.calls) == 3
        assert result.counters.pages_processed == 2
        assert result.counters.records_read == 4
        assert result.last_position == CursorPosition(T + timedelta(minutes=4), 4)

    def test_checkpoint_strictly_increases_per_page(self) -> None:
        odoo = FakeOdoo({"res.partner": make_records([(i, _ts(i // 3), f"p{i}") for i in range(1, 10)])})
        h = _Harness(odoo)

        h.orchestrator(_entity()).run()

        history = h.state.checkpoint_history
        assert len(history) == 5
        assert all(a < b for a, b in zip(history, history[1:]))
        assert len(h.raw.payloads("res.partner")) == 9

    def test_fetch_fields_always_include_id_and_cursor(self) -> None:
        odoo = FakeOdoo({"res.partner": []})
        h = _Harness(odoo)

        h.orchestrator(_entity(fields=["name"])).run()

        assert odoo.calls[0]["fields"] == ["name", "id", "write_date"]


class TestIncrementalWindow:
    """Ventana con solapamiento a partir del checkpoint."""

    def test_first_run_has_no_lower_bound_and_base_domain_is_kept(self) -> None:
        odoo = FakeOdoo({"res.partner": []})
        h = _Harness(odoo)

        h.orchestrator(_entity(domain=[["active", "=", True]])).run()

        assert odoo.calls[0]["domain"] == Comparison("active", "=", True)

    def test_window_starts_at_checkpoint_minus_overlap(self) -> None:
        odoo = FakeOdoo({"res.partner": []})
        h = _Harness(odoo)
        h.state.checkpoints["res.partner"] = Checkpoint("res.partner", "write_date", T, 7)

        h.orchestrator(_entity(domain=[["active", "=", True]], overlap_seconds=300)).run()

        assert odoo.calls[0]["domain"] == And(
            (
                Comparison("active", "=", True),
                Comparison("write_date", ">=", T - timedelta(seconds=300)),
            )
        )

    def test_overlap_redelivers_records_without_duplicates(self) -> None:
        records = make_records([(1, _ts(0), "a"), (2, _ts(1), "b")])
        odoo = FakeOdoo({"res.partner": records})
        h = _Harness(odoo)
        orchestrator = h.orchestrator(_entity(page_size=10))

        orchestrator.run()
        records[0]["name"] = "a2"
        orchestrator.run()

        payloads = h.raw.payloads("res.partner")
        assert sorted(payloads) == [1, 2]
        assert payloads[1]["name"] == "a2"
        assert h.raw.upsert_count == 4

    def test_empty_model_records_success_without_cursor(self) -> None:
        h = _Harness(FakeOdoo({"res.partner": []}))

        result = h.orchestrator(_entity()).run().results[0]

        checkpoint = h.state.checkpoints["res.partner"]
        assert result.succeeded
        assert checkpoint.cursor_value is None
        assert checkpoint.last_success_run_id == result.run_id
        assert h.state.runs[result.run_id].pages_processed == 0

    def test_cursor_field_mismatch_logs_warning(self) -> None:
        h = _Harness(FakeOdoo({"res.partner": []}))
        h.state.checkpoints["res.partner"] = Checkpoint("res.partner", "create_date", T, 1)
        messages: list[str] = []
        handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="WARNING")
        try:
            result = h.orchestrator(_entity()).run().results[0]
        finally:
            logger.remove(handler_id)

        assert result.succeeded
        assert any("create_date" in m and "write_date" in m for m in messages)


class TestFailuresAndResume:
    """Fallas a mitad de corrida y reanudacion."""

    def test_failure_on_second_page_keeps_first_page_checkpoint(self) -> None:
        odoo = FakeOdoo({"res.partner": make_records([(i, _ts(i), f"p{i}") for i in range(1, 6)])})
        odoo.failures = {2: OdooRemoteException("Timeout llamando a Odoo", retryable=True)}
        h = _Harness(odoo)

        summary = h.orchestrator(_entity()).run()

        assert summary.exit_code == 1
        assert summary.failed_entities == ["res.partner"]
        run = h.state.runs[summary.results[0].run_id]
        assert run.status == RunStatus.FAILED
        assert "Timeout" in run.error_message
        assert run.pages_processed == 1
        assert run.records_read == 2
        checkpoint = h.state.checkpoints["res.partner"]
        assert (checkpoint.cursor_value, checkpoint.cursor_id) == (T + timedelta(minutes=2), 2)
        assert checkpoint.last_success_run_id is None

    def test_next_run_resumes_from_checkpoint_minus_overlap(self) -> None:
        odoo = FakeOdoo({"res.partner": make_records([(i, _ts(i), f"p{i}") for i in range(1, 6)])})
        odoo.failures = {2: OdooRemoteException("Timeout llamando a Odoo", retryable=True)}
        h = _Harness(odoo)
        entity = _entity(overlap_seconds=120)
        h.orchestrator(entity).run()

        odoo.failures = {}
        calls_before = len(odoo.calls)
        summary = h.orchestrator(entity).run()

        assert summary.exit_code == 0
        resumed = odoo.calls[calls_before]
        assert resumed["domain"] == Comparison("write_date", ">=", T + timedelta(minutes=2) - timedelta(seconds=120))
        assert sorted(h.raw.payloads("res.partner")) == [1, 2, 3, 4, 5]
        run = h.state.runs[summary.results[0].run_id]
        # Pagina 1 re-entregada por el solapamiento (upserts sin efecto) y luego progreso nuevo
        assert run.records_read == 5
        assert run.status == RunStatus.SUCCESS

    def test_store_failure_rolls_back_only_the_failing_page(self) -> None:
        odoo = FakeOdoo({"res.partner": make_records([(i, _ts(i), f"p{i}") for i in range(1, 6)])})
        h = _Harness(odoo)
        h.database.fail_on_commit = 2

        result = h.orchestrator(_entity()).run().results[0]

        assert not result.succeeded
        assert h.database.rollbacks == 1
        assert sorted(h.raw.payloads("res.partner")) == [1, 2]
        assert h.state.checkpoints["res.partner"].cursor_id == 2
        assert h.state.runs[result.run_id].pages_processed == 1

    def test_invalid_record_rejects_whole_page(self) -> None:
        records = make_records([(1, _ts(1), "ok")]) + [{"id": "abc", "write_date": _ts(2), "name": "bad"}]
        h = _Harness(FakeOdoo({"res.partner": records}))

        result = h.orchestrator(_entity()).run().results[0]

        assert result.status == RunStatus.FAILED
        assert "abc" in result.error
        assert h.raw.rows == {}
        assert "res.partner" not in h.state.checkpoints

    def test_invalid_cursor_value_fails_the_run(self) -> None:
        records = [{"id": 1, "write_date": False, "name": "sin fecha"}]
        h = _Harness(FakeOdoo({"res.partner": records}))

        result = h.orchestrator(_entity()).run().results[0]

        assert result.status == RunStatus.FAILED
        assert h.state.runs[result.run_id].error_message

    def test_source_ignoring_keyset_predicate_does_not_loop_forever(self) -> None:
        odoo = FakeOdoo({"res.partner": make_records([(1, _ts(1), "a"), (2, _ts(2), "b")])})
        odoo.ignore_domain = True
        h = _Harness(odoo)

        result = h.orchestrator(_entity()).run().results[0]

        assert result.status == RunStatus.FAILED
        assert len(odoo.calls) == 2
        assert h.state.checkpoints["res.partner"].cursor_id == 2

    def test_failure_to_finish_run_is_logged_not_raised(self) -> None:
        h = _Harness(FakeOdoo({"res.partner": [{"id": None, "write_date": _ts(1)}]}))
        h.state.fail_finish = True

        result = h.orchestrator(_entity()).run().results[0]

        assert result.status == RunStatus.FAILED
        assert h.lock.released


class TestRunIsolationAndLock:
    """Aislamiento entre modelos y exclusion global."""

    def test_one_model_failing_does_not_block_the_next(self) -> None:
        odoo = FakeOdoo(
            {
                "bad.model": [{"id": "x", "write_date": _ts(1)}],
                "res.partner": make_records([(1, _ts(1), "a")]),
            }
        )
        h = _Harness(odoo)

        summary = h.orchestrator(_entity("bad.model"), _entity("res.partner")).run()

        assert [r.model for r in summary.results] == ["bad.model", "res.partner"]
        assert summary.failed_entities == ["bad.model"]
        assert summary.exit_code == 1
        assert h.raw.payloads("res.partner")[1]["name"] == "a"
        assert h.lock.released

    def test_each_model_gets_its_own_run(self) -> None:
        h = _Harness(FakeOdoo({"a.model": [], "b.model": []}))

        summary = h.orchestrator(_entity("a.model"), _entity("b.model")).run()

        run_ids = {r.run_id for r in summary.results}
        assert len(run_ids) == 2
        assert {r.model for r in h.state.runs.values()} == {"a.model", "b.model"}

    def test_lock_contention_is_a_clean_exit(self) -> None:
        odoo = FakeOdoo({"res.partner": make_records([(1, _ts(1), "a")])})
        h = _Harness(odoo, lock=FakeLock(available=False))

        summary = h.orchestrator(_entity()).run()

        assert summary.lock_acquired is False
        assert summary.exit_code == 0
        assert summary.results == []
        assert odoo.calls == []
        assert h.state.runs == {}
        assert h.lock.released is False

    def test_lock_released_even_if_processing_raises(self) -> None:
        h = _Harness(FakeOdoo({}))
        orchestrator = h.orchestrator(_entity())

        def boom(entity):
            raise RuntimeError("unexpected")

        orchestrator.sync_entity = boom
        with pytest.raises(RuntimeError):
            orchestrator.run()
        assert h.lock.released
