"""
Entidad de dominio: arbol de filtros componible.

Un filtro es una de cuatro variantes:
- Comparison: hoja `campo operador valor`
- And / Or: conjuncion / disyuncion de N operandos
- Not: negacion de un operando

El arbol no sabe nada del backend; la serializacion a dominio Odoo vive en
`odoo_sync.infrastructure.external.odoo.domain_serializer`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple, Union

COMPARISON_OPERATORS = frozenset(
    {
        "=", "!=", ">", ">=", "<", "<=", "=?",
        "like", "not like", "ilike", "not ilike", "=like", "=ilike",
        "in", "not in", "child_of", "parent_of", "any", "not any",
    }
)


@dataclass(frozen=True)
class Comparison:
    """Hoja del arbol: compara un campo contra un valor."""

    field: str
    operator: str
    value: Any

    def __post_init__(self) -> None:
        if not self.field:
            raise ValueError("El campo de la comparacion no puede estar vacio")
        if self.operator not in COMPARISON_OPERATORS:
            raise ValueError(f"Operador no soportado: {self.operator!r}")


@dataclass(frozen=True)
class And:
    """Conjuncion. Sin operandos equivale a 'todos los registros'."""

    operands: Tuple["Filter", ...] = ()


@dataclass(frozen=True)
class Or:
    """Disyuncion; requiere al menos un operando."""

    operands: Tuple["Filter", ...]

    def __post_init__(self) -> None:
        if not self.operands:
            raise ValueError("Una disyuncion requiere al menos un operando")


@dataclass(frozen=True)
class Not:
    operand: "Filter"


Filter = Union[Comparison, And, Or, Not]

MATCH_ALL: Filter = And(())


def is_match_all(node: Filter) -> bool:
    return isinstance(node, And) and not node.operands


def all_of(*nodes: Filter) -> Filter:
    """
    Combina filtros con AND.

    Aplana conjunciones anidadas y descarta MATCH_ALL, de modo que
    `all_of(base, extra)` con base vacia devuelve solo `extra`.
    """
    flat: list[Filter] = []
    for node in nodes:
        if isinstance(node, And):
            flat.extend(node.operands)
        else:
            flat.append(node)
    if len(flat) == 1:
        return flat[0]
    return And(tuple(flat))


def any_of(*nodes: Filter) -> Filter:
    """Combina filtros con OR (aplana disyunciones anidadas)."""
    flat: list[Filter] = []
    for node in nodes:
        if isinstance(node, Or):
            flat.extend(node.operands)
        else:
            flat.append(node)
    if len(flat) == 1:
        return flat[0]
    return Or(tuple(flat))
