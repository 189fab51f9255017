"""Intermediate predicate representation.

The compiler turns a UserQuery into a list of predicates before rendering
anything, so predicate selection can be inspected and tested without
looking at SQL text.
"""

from dataclasses import dataclass
from typing import Any

OP_EQ = "="
OP_GT = ">"
OP_GTE = ">="
OP_LTE = "<="
OP_IN = "IN"

OPERATORS = frozenset({OP_EQ, OP_GT, OP_GTE, OP_LTE, OP_IN})


@dataclass(frozen=True)
class Predicate:
    """A single column comparison.

    Attributes:
        column: Column name (validated identifier).
        operator: One of OPERATORS.
        value: Scalar for comparisons, tuple for IN.
    """

    column: str
    operator: str
    value: Any


@dataclass(frozen=True)
class Ordering:
    """ORDER BY clause."""

    column: str
    descending: bool = True
