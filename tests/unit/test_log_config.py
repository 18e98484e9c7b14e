from __future__ import annotations

import json
from pathlib import Path

from loguru import logger

from odoo_sync.shared.utils.log_config import configure_logging


def test_file_sink_writes_json_lines_with_context(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "sync.log"

    configure_logging(level="INFO", log_file=str(log_file), serialize=True)
    logger.bind(component="sync-orchestrator", model="res.partner").info("Pagina confirmada")
    logger.debug("no deberia aparecer")
    logger.remove()

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])["record"]
    assert record["message"] == "Pagina confirmada"
    assert record["extra"] == {"component": "sync-orchestrator", "model": "res.partner"}


def test_default_component_is_set(tmp_path: Path) -> None:
    log_file = tmp_path / "plain.log"

    configure_logging(level="DEBUG", log_file=str(log_file))
    logger.info("hola")
    logger.remove()

    assert "hola" in log_file.read_text(encoding="utf-8")
