"""
Entidades del dominio.
"""
from odoo_sync.domain.entities.filters import (
    And,
    Comparison,
    Filter,
    MATCH_ALL,
    Not,
    Or,
    all_of,
    any_of,
)
from odoo_sync.domain.entities.sync_state import (
    Checkpoint,
    CursorPosition,
    RunCounters,
    SyncRun,
    parse_record_id,
)

__all__ = [
    # Filtros
    "And",
    "Comparison",
    "Filter",
    "MATCH_ALL",
    "Not",
    "Or",
    "all_of",
    "any_of",
    # Estado de sync
    "Checkpoint",
    "CursorPosition",
    "RunCounters",
    "SyncRun",
    "parse_record_id",
]
