"""
Configuracion de logging (loguru) para el job de sincronizacion y la API de estado.

- stderr: texto legible o JSON lines (serialize=True) para agregadores de logs.
- archivo opcional con rotacion/retencion.

El contexto estructurado (component, model, run_id) se agrega con `logger.bind(...)`
en cada componente y queda en `record["extra"]`.
"""
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

TEXT_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{extra[component]} | {message}"
)


def configure_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    serialize: bool = False,
) -> None:
    """
    Reemplaza el sink por defecto de loguru.

    Args:
        level: Nivel minimo (DEBUG, INFO, WARNING, ...)
        log_file: Ruta de archivo de log; None o "" para desactivarlo
        serialize: Si True, emite JSON lines en stderr
    """
    logger.remove()
    logger.configure(extra={"component": "odoo-sync"})

    if serialize:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=TEXT_FORMAT)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            rotation="500 MB",
            retention="10 days",
            level=level,
            serialize=serialize,
        )
