"""Temporal filter compilation and evaluation."""

from .compiler import compile_filter, parse_date_literal
from .expression import FilterExpression, field_values, parse_expression

__all__ = [
    "FilterExpression",
    "compile_filter",
    "field_values",
    "parse_date_literal",
    "parse_expression",
]
