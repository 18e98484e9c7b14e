"""
Ciclo de vida (inicio y cierre) de la API de estado.
"""
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable

from fastapi import FastAPI
from loguru import logger

from odoo_sync.core.config import Settings
from odoo_sync.shared.utils.log_config import configure_logging


def build_lifespan(settings: Settings) -> Callable[[FastAPI], AsyncContextManager[None]]:
    """
    Construye el lifespan de la aplicacion.

    Args:
        settings: Configuracion de la aplicacion

    Returns:
        Callable: Context manager asincrono para `FastAPI(lifespan=...)`
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(
            level=settings.LOG_LEVEL,
            log_file=settings.LOG_FILE or None,
            serialize=settings.LOG_JSON,
        )
        logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
        logger.info(f"Entorno: {settings.ENVIRONMENT}")
        _validate_config(settings)
        logger.success("Aplicacion iniciada correctamente")

        yield

        logger.info("Cerrando aplicacion...")

    return lifespan


def _validate_config(settings: Settings) -> None:
    """Valida que la configuracion critica este presente."""
    warnings = []

    if not settings.DATABASE_URL and not (settings.DATABASE_PASSWORD or settings.POSTGRES_PASSWORD):
        warnings.append("Sin DATABASE_URL ni password de Postgres - las consultas de estado fallaran")

    for warning in warnings:
        logger.warning(f"CONFIG: {warning}")
