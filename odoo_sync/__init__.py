"""
Espejo incremental Odoo -> PostgreSQL.

Este paquete esta pensado para ejecutarse como job (cron / systemd timer):
cada invocacion hace una pasada completa sobre los modelos configurados y termina.

Objetivos de diseño:
- Idempotencia: UPSERT por (model, odoo_id); re-entregar un registro no duplica datos.
- Incremental: cursor compuesto (write_date, id) con ventana de solapamiento.
- Reanudable: cada pagina (datos + cursor + contadores) se confirma en una sola transaccion.
"""

__version__ = "1.0.0"
