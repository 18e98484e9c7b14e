"""
Constantes relacionadas con la sincronizacion Odoo -> PostgreSQL.
"""
from enum import Enum


class RunStatus(str, Enum):
    """Estados posibles de una corrida (run) por modelo."""
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class LockStrategy(str, Enum):
    """Estrategia de exclusion mutua entre procesos."""
    ADVISORY = "advisory"
    NONE = "none"  # p.ej. detras de un pooler en modo transaccion


class SslMode(str, Enum):
    """Modo SSL de la conexion a PostgreSQL."""
    DISABLE = "disable"
    REQUIRE = "require"


# Valores por defecto de cada modelo sincronizado
DEFAULT_CURSOR_FIELD = "write_date"
DEFAULT_OVERLAP_SECONDS = 120
DEFAULT_PAGE_SIZE = 500

# Campo identidad de Odoo (desempate del cursor)
ODOO_ID_FIELD = "id"

# Lock global (pg_try_advisory_lock) compartido por todas las invocaciones
GLOBAL_ADVISORY_LOCK_ID = 41023017

# Longitud maxima del texto de error persistido en odoo_sync_runs
ERROR_MESSAGE_MAX_LENGTH = 2000

# Tablas del contrato de persistencia
RAW_RECORDS_TABLE = "odoo_raw_records"
SYNC_STATE_TABLE = "odoo_sync_state"
SYNC_RUNS_TABLE = "odoo_sync_runs"
