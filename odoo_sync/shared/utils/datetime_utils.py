"""
Utilidades puras de fechas para el formato de Odoo.

Odoo serializa datetimes como strings UTC sin zona: "YYYY-MM-DD HH:MM:SS".
En PostgreSQL se guardan como TIMESTAMPTZ, por eso se normaliza siempre a UTC aware.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

ODOO_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_now() -> datetime:
    """Retorna la hora actual en UTC, como datetime aware."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Normaliza datetime a UTC (aware). Los naive se asumen UTC, como hace Odoo."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_odoo_datetime(value: Any) -> Optional[datetime]:
    """
    Parsea un timestamp de Odoo (o ISO8601) a datetime UTC.

    Retorna None si el valor esta vacio o no es parseable; Odoo devuelve
    `False` para campos sin valor.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    return ensure_utc(parsed)


def format_odoo_datetime(dt: datetime) -> str:
    """Serializa a "YYYY-MM-DD HH:MM:SS[.ffffff]" en UTC, el formato que Odoo compara en dominios."""
    dt_utc = ensure_utc(dt)
    text = dt_utc.strftime(ODOO_DATETIME_FORMAT)
    if dt_utc.microsecond:
        text += f".{dt_utc.microsecond:06d}"
    return text
