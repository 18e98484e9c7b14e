"""
Excepciones del pipeline de sincronizacion Odoo -> PostgreSQL.

Taxonomia:
- OdooAuthException: credenciales invalidas / sin permisos. Fatal, no se reintenta.
- OdooRemoteException: fallo remoto (red, timeout, 5xx, respuesta malformada, error JSON-RPC).
- RecordValidationException: registro sin id entero o sin cursor valido. Aborta el modelo.
- SyncStoreException: error de PostgreSQL dentro de una sesion o unidad de trabajo.
- SyncConfigError: configuracion invalida.
"""
from typing import Any, Optional

from odoo_sync.shared.exceptions.base import AppException


class OdooSyncException(AppException):
    """Excepción base del sincronizador."""

    def __init__(self, message: str, error_code: str = "SYNC_ERROR", details=None):
        super().__init__(
            message=message,
            status_code=500,
            error_code=error_code,
            details=details
        )


class OdooAuthException(OdooSyncException):
    """Fallo de autenticacion/autorizacion contra Odoo."""

    def __init__(self, message: str, details=None):
        super().__init__(message=message, error_code="ODOO_AUTH_ERROR", details=details)
        self.status_code = 401


class OdooRemoteException(OdooSyncException):
    """
    Fallo en la llamada JSON-RPC.

    `code` es el codigo numerico del error JSON-RPC (o el status HTTP) si existe.
    `retryable` indica como se clasifico el fallo; solo es informativo, la
    decision de reintento se toma sobre el resultado etiquetado (ver RpcOutcome).
    """

    def __init__(self, message: str, code: Optional[int] = None, retryable: bool = False):
        super().__init__(
            message=message,
            error_code="ODOO_REMOTE_ERROR",
            details={"code": code, "retryable": retryable},
        )
        self.code = code
        self.retryable = retryable


class RecordValidationException(OdooSyncException):
    """Registro recibido de Odoo que no cumple el contrato (id / cursor)."""

    def __init__(self, model: str, message: str, record_id: Any = None):
        super().__init__(
            message=message,
            error_code="RECORD_VALIDATION_ERROR",
            details={"model": model, "record_id": None if record_id is None else str(record_id)},
        )
        self.model = model


class CursorRegressionException(RecordValidationException):
    """La pagina no avanzo la posicion del cursor (la fuente ignoro el predicado keyset)."""


class SyncStoreException(OdooSyncException):
    """Error de PostgreSQL; la transaccion en curso ya fue revertida."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="SYNC_STORE_ERROR")


class SyncConfigError(OdooSyncException):
    """Error de configuración del pipeline."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="SYNC_CONFIG_ERROR")
