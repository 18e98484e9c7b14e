"""
Dependencias entre capas: domain <- application <- infrastructure.
"""
from __future__ import annotations

import ast
from pathlib import Path

import pytest

import odoo_sync
from odoo_sync.domain.repositories.sync_repository import SyncLock
from odoo_sync.infrastructure.database.advisory_lock import NoopSyncLock, PostgresAdvisoryLock

PACKAGE_ROOT = Path(odoo_sync.__file__).parent


def _imported_modules(path: Path) -> list[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    modules = []
    for node in ast.walk(tree):
        if isinstance(node, ast.ImportFrom) and node.module:
            modules.append(node.module)
        elif isinstance(node, ast.Import):
            modules.extend(alias.name for alias in node.names)
    return modules


@pytest.mark.parametrize(
    "layer, forbidden",
    [
        ("domain", ("odoo_sync.application", "odoo_sync.infrastructure", "odoo_sync.api")),
        ("application", ("odoo_sync.infrastructure", "odoo_sync.api")),
    ],
)
def test_inner_layers_do_not_import_outer_layers(layer: str, forbidden: tuple) -> None:
    offenders = [
        f"{path.relative_to(PACKAGE_ROOT)}: {module}"
        for path in sorted((PACKAGE_ROOT / layer).rglob("*.py"))
        for module in _imported_modules(path)
        if module.startswith(forbidden)
    ]

    assert offenders == []


def test_lock_implementations_satisfy_the_domain_port() -> None:
    assert issubclass(PostgresAdvisoryLock, SyncLock)
    assert issubclass(NoopSyncLock, SyncLock)
