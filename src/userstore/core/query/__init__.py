"""Query compilation for the user table."""

from userstore.core.query.compiler import (
    QueryCompiler,
    QueryPlan,
    Statement,
    compile_to_sql,
    quote_identifier,
)
from userstore.core.query.predicates import Ordering, Predicate

__all__ = [
    "Ordering",
    "Predicate",
    "QueryCompiler",
    "QueryPlan",
    "Statement",
    "compile_to_sql",
    "quote_identifier",
]
