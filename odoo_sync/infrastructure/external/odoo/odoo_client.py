"""
Cliente mínimo de Odoo JSON-RPC (sin SDKs externos).

Requisitos cubiertos:
- requests (un POST por llamada a /jsonrpc)
- autenticación (database, username, api_key) -> uid
- search_read paginado, filtrado y ordenado
- reintentos con backoff exponencial + jitter para fallos transitorios
"""

from __future__ import annotations

import random
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests
from loguru import logger

from odoo_sync.domain.entities.filters import Filter
from odoo_sync.domain.repositories.sync_repository import IRecordSource
from odoo_sync.shared.exceptions.sync import OdooAuthException, OdooRemoteException

from .domain_serializer import to_odoo_domain
from .types import (
    OdooCredentials,
    RetryPolicy,
    RpcOutcome,
    OutcomeKind,
    build_rpc_payload,
    compute_backoff_delay,
    should_retry,
)

# Excepciones de Odoo que indican credenciales/permisos, aunque lleguen como error JSON-RPC
AUTH_ERROR_NAMES = frozenset(
    {
        "odoo.exceptions.AccessDenied",
        "odoo.exceptions.AccessError",
        "odoo.http.SessionExpiredException",
    }
)

_log = logger.bind(component="odoo-client")


class OdooClient(IRecordSource):
    """
    Cliente HTTP de Odoo.

    Importante:
    - Es inmutable: `authenticate()` no modifica la instancia, retorna un
      cliente nuevo con el uid de sesión ya resuelto.
    - No interpreta el dominio: solo lo serializa y lo transmite.
    """

    def __init__(
        self,
        credentials: OdooCredentials,
        *,
        retry: Optional[RetryPolicy] = None,
        session: Optional[requests.Session] = None,
        uid: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
        rand: Callable[[], float] = random.random,
    ) -> None:
        self._creds = credentials
        self._retry = retry or RetryPolicy()
        self._session = session or requests.Session()
        self._uid = uid
        self._sleep = sleep
        self._rand = rand

    @property
    def uid(self) -> Optional[int]:
        return self._uid

    @property
    def is_authenticated(self) -> bool:
        return self._uid is not None

    def authenticate(self) -> "OdooClient":
        """
        Intercambia (database, username, api_key) por el uid de sesión.

        Returns:
            OdooClient: cliente autenticado (nueva instancia)

        Raises:
            OdooAuthException: credenciales rechazadas o uid inválido
            OdooRemoteException: Odoo inalcanzable tras agotar reintentos
        """
        try:
            result = self._call_rpc(
                "common",
                "authenticate",
                [self._creds.database, self._creds.username, self._creds.api_key, {}],
            )
        except OdooRemoteException as e:
            if e.retryable:
                raise
            raise OdooAuthException(f"Odoo rechazó la autenticación: {e.message}") from e

        if isinstance(result, bool) or not isinstance(result, int) or result <= 0:
            raise OdooAuthException(
                f"No se pudo autenticar en Odoo como '{self._creds.username}' "
                f"(database '{self._creds.database}'): uid inválido {result!r}"
            )

        _log.info(f"Autenticado en Odoo: database={self._creds.database} uid={result}")
        return OdooClient(
            self._creds,
            retry=self._retry,
            session=self._session,
            uid=result,
            sleep=self._sleep,
            rand=self._rand,
        )

    def search_read(
        self,
        model: str,
        domain: Filter,
        fields: Sequence[str],
        order: str,
        limit: int,
    ) -> List[Dict[str, Any]]:
        """
        Ejecuta `search_read` sobre el modelo.

        Retorna como máximo `limit` registros ordenados según `order`.
        """
        if self._uid is None:
            raise OdooAuthException("El cliente Odoo no está autenticado; llama authenticate() primero")

        result = self._call_rpc(
            "object",
            "execute_kw",
            [
                self._creds.database,
                self._uid,
                self._creds.api_key,
                model,
                "search_read",
                [to_odoo_domain(domain)],
                {"fields": list(fields), "order": order, "limit": limit},
            ],
        )

        if not isinstance(result, list):
            raise OdooRemoteException(
                f"search_read de '{model}' devolvió {type(result).__name__}, se esperaba una lista"
            )
        return result

    def _call_rpc(self, service: str, method: str, args: list[Any]) -> Any:
        """
        Llamada JSON-RPC con reintentos.

        La decisión de reintentar depende solo de la etiqueta del resultado
        (OK / RETRYABLE / FATAL). Agotados los intentos se propaga el último error.
        """
        max_attempts = self._retry.max_attempts

        for attempt in range(1, max_attempts + 1):
            outcome = self._send_request(build_rpc_payload(service, method, args))

            if outcome.kind is OutcomeKind.OK:
                return outcome.value

            if not should_retry(outcome, attempt, max_attempts):
                raise outcome.error

            delay_s = compute_backoff_delay(attempt, self._retry.backoff_base_s, self._rand)
            _log.warning(
                f"Reintentando Odoo {service}.{method} "
                f"(intento {attempt}/{max_attempts}, espera {delay_s:.2f}s): {outcome.error}"
            )
            self._sleep(delay_s)

        raise OdooRemoteException(f"Odoo {service}.{method} falló tras {max_attempts} intentos")

    def _send_request(self, payload: dict[str, Any]) -> RpcOutcome[Any]:
        """
        Un intento HTTP, clasificado.

        Estrategia:
        - red / timeout / 5xx / JSON malformado: RETRYABLE
        - 401 / 403 / AccessDenied: FATAL (OdooAuthException)
        - otros 4xx / error JSON-RPC: FATAL
        """
        try:
            resp = self._session.post(
                self._creds.endpoint,
                json=payload,
                timeout=self._retry.timeout_s,
            )
        except requests.Timeout as e:
            return RpcOutcome.retryable(
                _chain(OdooRemoteException(f"Timeout ({self._retry.timeout_s}s) llamando a Odoo", retryable=True), e)
            )
        except requests.RequestException as e:
            return RpcOutcome.retryable(
                _chain(OdooRemoteException(f"Error de red llamando a Odoo: {e}", retryable=True), e)
            )

        status = resp.status_code
        if status >= 500:
            return RpcOutcome.retryable(
                OdooRemoteException(f"Odoo respondió HTTP {status}", code=status, retryable=True)
            )
        if status in (401, 403):
            return RpcOutcome.fatal(
                OdooAuthException(f"Autenticación/autorización rechazada con HTTP {status}", details={"code": status})
            )
        if not 200 <= status < 300:
            return RpcOutcome.fatal(OdooRemoteException(f"Odoo respondió HTTP {status}: {resp.text[:500]}", code=status))

        try:
            body = resp.json()
        except ValueError as e:
            return RpcOutcome.retryable(
                _chain(OdooRemoteException("Respuesta JSON-RPC no parseable", retryable=True), e)
            )

        if not isinstance(body, dict):
            return RpcOutcome.retryable(OdooRemoteException("Respuesta JSON-RPC malformada", retryable=True))

        error = body.get("error")
        if error:
            return RpcOutcome.fatal(_rpc_error_to_exception(error))

        if "result" not in body:
            return RpcOutcome.retryable(
                OdooRemoteException("Respuesta JSON-RPC sin 'result' ni 'error'", retryable=True)
            )
        return RpcOutcome.ok(body["result"])


def _chain(error: Exception, cause: BaseException) -> Exception:
    error.__cause__ = cause
    return error


def _rpc_error_to_exception(error: Any) -> Exception:
    if not isinstance(error, dict):
        return OdooRemoteException(f"Odoo JSON-RPC error: {error!r}")

    code = error.get("code")
    message = error.get("message") or "sin mensaje"
    data = error.get("data") if isinstance(error.get("data"), dict) else {}
    detail = data.get("message")
    text = f"Odoo JSON-RPC error {code}: {message}" + (f" ({detail})" if detail else "")

    if data.get("name") in AUTH_ERROR_NAMES:
        return OdooAuthException(text, details={"code": code, "name": data.get("name")})
    return OdooRemoteException(text, code=code if isinstance(code, int) else None)
