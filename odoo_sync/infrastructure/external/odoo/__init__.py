"""
Integracion con Odoo via JSON-RPC.

Solo lectura: el sincronizador nunca escribe en Odoo.
"""
from .odoo_client import OdooClient
from .types import OdooCredentials, RetryPolicy

__all__ = ["OdooClient", "OdooCredentials", "RetryPolicy"]
