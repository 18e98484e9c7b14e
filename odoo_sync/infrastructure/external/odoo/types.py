"""
Tipos y utilidades puras para el cliente JSON-RPC de Odoo.

Se mantienen libres de I/O para poder testearlos fácilmente.
"""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class OdooCredentials:
    base_url: str
    database: str
    username: str
    api_key: str

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/jsonrpc"


@dataclass(frozen=True)
class RetryPolicy:
    """
    Politica de reintentos del cliente.

    - max_retries: reintentos adicionales al primer intento (intentos = max_retries + 1)
    - backoff_base_s: delay base; el intento k espera base * 2^(k-1) + jitter[0, base)
    - timeout_s: timeout por request (conexion + lectura)
    """

    max_retries: int = 3
    backoff_base_s: float = 0.5
    timeout_s: float = 30.0

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


class OutcomeKind(str, Enum):
    OK = "ok"
    RETRYABLE = "retryable-error"
    FATAL = "fatal-error"


@dataclass(frozen=True)
class RpcOutcome(Generic[T]):
    """
    Resultado etiquetado de un intento de llamada.

    El loop de reintentos decide solo a partir de `kind`; nunca inspecciona
    la jerarquia de excepciones.
    """

    kind: OutcomeKind
    value: Optional[T] = None
    error: Optional[Exception] = None

    @classmethod
    def ok(cls, value: T) -> "RpcOutcome[T]":
        return cls(kind=OutcomeKind.OK, value=value)

    @classmethod
    def retryable(cls, error: Exception) -> "RpcOutcome[T]":
        return cls(kind=OutcomeKind.RETRYABLE, error=error)

    @classmethod
    def fatal(cls, error: Exception) -> "RpcOutcome[T]":
        return cls(kind=OutcomeKind.FATAL, error=error)


def should_retry(outcome: RpcOutcome[Any], attempt: int, max_attempts: int) -> bool:
    """True si el intento `attempt` (1-indexed) fallo de forma recuperable y quedan intentos."""
    return outcome.kind is OutcomeKind.RETRYABLE and attempt < max_attempts


def compute_backoff_delay(
    attempt: int,
    base_delay_s: float,
    rand: Callable[[], float] = random.random,
) -> float:
    """
    Delay (segundos) antes de reintentar tras el intento `attempt` (1-indexed).

    delay = base * 2^(attempt-1) + jitter, con jitter en [0, base).
    """
    if attempt < 1:
        raise ValueError("attempt es 1-indexed")
    return base_delay_s * (2 ** (attempt - 1)) + rand() * base_delay_s


def build_rpc_payload(service: str, method: str, args: list[Any]) -> dict[str, Any]:
    """Cuerpo JSON-RPC 2.0 para el endpoint /jsonrpc de Odoo."""
    return {
        "jsonrpc": "2.0",
        "method": "call",
        "params": {"service": service, "method": method, "args": args},
        "id": str(uuid.uuid4()),
    }
