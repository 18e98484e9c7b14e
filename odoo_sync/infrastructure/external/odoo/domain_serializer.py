"""
Serializacion arbol de filtros <-> dominio Odoo.

Odoo expresa los dominios en notacion prefija:
    ['&', ('a', '=', 1), '|', ('b', '>', 2), ('c', '<', 3)]
- '&' y '|' son binarios, '!' es unario
- en el nivel superior, los terminos sueltos se combinan con AND implicito
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from odoo_sync.domain.entities.filters import (
    MATCH_ALL,
    And,
    Comparison,
    Filter,
    Not,
    Or,
    all_of,
    any_of,
)
from odoo_sync.shared.utils.datetime_utils import format_odoo_datetime

AND_OPERATOR = "&"
OR_OPERATOR = "|"
NOT_OPERATOR = "!"


def _serialize_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_odoo_datetime(value)
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    return value


def to_odoo_domain(node: Filter) -> list[Any]:
    """
    Serializa el arbol a un dominio Odoo (lista JSON-serializable).

    MATCH_ALL se serializa como [] (sin restricciones).
    """
    if isinstance(node, Comparison):
        return [[node.field, node.operator, _serialize_value(node.value)]]

    if isinstance(node, Not):
        inner = to_odoo_domain(node.operand)
        if not inner:
            raise ValueError("No se puede negar un filtro vacio")
        return [NOT_OPERATOR] + inner

    if isinstance(node, (And, Or)):
        parts = [to_odoo_domain(op) for op in node.operands]
        # Un operando vacio es "todos": neutro en AND, absorbente en OR
        if isinstance(node, Or) and any(not p for p in parts):
            return []
        parts = [p for p in parts if p]
        if not parts:
            return []
        operator = AND_OPERATOR if isinstance(node, And) else OR_OPERATOR
        domain: list[Any] = [operator] * (len(parts) - 1)
        for part in parts:
            domain.extend(part)
        return domain

    raise TypeError(f"Nodo de filtro desconocido: {type(node).__name__}")


def parse_odoo_domain(domain: Any) -> Filter:
    """
    Convierte un dominio Odoo (p.ej. el `domain` del YAML) en un arbol tipado.

    Raises:
        ValueError: si el dominio esta mal formado o usa operadores no soportados
    """
    if not isinstance(domain, (list, tuple)):
        raise ValueError("El dominio debe ser una lista")

    tokens = list(domain)
    pos = 0

    def parse_term() -> Filter:
        nonlocal pos
        if pos >= len(tokens):
            raise ValueError("Dominio incompleto: faltan operandos")
        token = tokens[pos]
        pos += 1

        if token == AND_OPERATOR:
            left = parse_term()
            return all_of(left, parse_term())
        if token == OR_OPERATOR:
            left = parse_term()
            return any_of(left, parse_term())
        if token == NOT_OPERATOR:
            return Not(parse_term())
        if isinstance(token, (list, tuple)) and len(token) == 3 and isinstance(token[0], str):
            return Comparison(token[0], token[1], token[2])
        raise ValueError(f"Termino de dominio invalido: {token!r}")

    terms: list[Filter] = []
    while pos < len(tokens):
        terms.append(parse_term())

    if not terms:
        return MATCH_ALL
    return all_of(*terms)
