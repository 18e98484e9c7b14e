"""
CLI: Odoo -> Postgres (sync incremental, una direccion).

Uso recomendado:
  - Ejecutar como job (cron/systemd timer). Si una corrida previa sigue
    activa, la nueva sale con exit 0 sin hacer nada (advisory lock).
  - No se integra al request/response de la API de estado.

Variables de entorno:
  - ODOO_API_KEY (obligatoria)
  - POSTGRES_PASSWORD (si el YAML usa conexion por parametros)
  - DATABASE_URL (si el YAML no define postgres.connection)
  - SYNC_CONFIG_PATH, LOG_LEVEL, LOG_FILE, LOG_JSON (opcionales)

Ejecución:
  odoo-sync sync --config config/sync.yml
  odoo-sync sync -c config/sync.yml --only res.partner --only sale.order
  odoo-sync schema
"""

from __future__ import annotations

import argparse
from importlib.resources import files
from typing import List, Optional, Sequence

from dotenv import load_dotenv
from loguru import logger

from odoo_sync.application.services.sync_orchestrator import SyncOrchestrator
from odoo_sync.core.config import Settings, get_settings
from odoo_sync.core.sync_config import AppConfig, load_sync_config
from odoo_sync.infrastructure.database.advisory_lock import build_sync_lock
from odoo_sync.infrastructure.database.session import PostgresDatabase
from odoo_sync.infrastructure.external.odoo import OdooClient
from odoo_sync.infrastructure.repositories.raw_record_repository import RawRecordRepository
from odoo_sync.infrastructure.repositories.sync_state_repository import SyncStateRepository
from odoo_sync.shared.exceptions.sync import OdooSyncException
from odoo_sync.shared.utils.log_config import configure_logging


def read_schema_sql() -> str:
    return files("odoo_sync.infrastructure.database").joinpath("schema.sql").read_text(encoding="utf-8")


def build_orchestrator(
    config: AppConfig,
    settings: Settings,
    client: OdooClient,
    only: Optional[List[str]] = None,
) -> SyncOrchestrator:
    """Arma el grafo de dependencias del sync a partir de la configuracion."""
    database = PostgresDatabase(
        config.database_dsn(settings),
        sslmode=config.postgres.ssl_mode.value,
        connect_timeout=config.sync.request_timeout_seconds,
    )
    return SyncOrchestrator(
        client=client,
        database=database,
        raw_records=RawRecordRepository(),
        sync_state=SyncStateRepository(database),
        entities=config.select_models(only),
        lock=build_sync_lock(config.postgres.lock_strategy, database),
    )


def run_sync(config_path: Optional[str], only: Optional[List[str]] = None) -> int:
    """
    Ejecuta una invocacion completa del sync.

    Returns:
        0 si todos los modelos terminaron OK (o el lock estaba ocupado),
        1 ante un error fatal o si algun modelo fallo.
    """
    settings = get_settings()
    configure_logging(
        level=settings.LOG_LEVEL,
        log_file=settings.LOG_FILE or None,
        serialize=settings.LOG_JSON,
    )

    path = config_path or settings.SYNC_CONFIG_PATH
    try:
        config = load_sync_config(path)
        client = OdooClient(config.odoo_credentials(settings), retry=config.sync.retry_policy())

        logger.info(f"Autenticando contra Odoo {config.odoo.base_url} (db={config.odoo.database})...")
        client = client.authenticate()

        orchestrator = build_orchestrator(config, settings, client, only)
        summary = orchestrator.run()
    except OdooSyncException as e:
        logger.error(f"Error fatal [{e.error_code}]: {e.message}")
        return 1

    if not summary.lock_acquired:
        logger.info("Otra instancia del sync está en curso; nada que hacer.")
    return summary.exit_code


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="odoo-sync",
        description="Espejo incremental Odoo -> PostgreSQL",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser("sync", help="Ejecuta una corrida incremental de todos los modelos.")
    sync_parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Ruta al YAML de configuracion (default: SYNC_CONFIG_PATH).",
    )
    sync_parser.add_argument(
        "--only",
        action="append",
        metavar="MODEL",
        help="Restringe la corrida a este modelo (repetible).",
    )

    subparsers.add_parser("schema", help="Solo imprime el DDL de las tablas (no ejecuta sync).")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(override=False)
    args = _build_parser().parse_args(argv)

    if args.command == "schema":
        print(read_schema_sql())
        return 0

    return run_sync(args.config, args.only)


if __name__ == "__main__":
    raise SystemExit(main())
