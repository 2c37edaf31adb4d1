"""
Filter expression parser and evaluator.

Grammar::

    expr       := and_expr (("||" | "or") and_expr)*
    and_expr   := unary (("&&" | "and") unary)*
    unary      := ("!" | "not") unary | "(" expr ")" | comparison
    comparison := operand OP operand        OP: < > == >= <= !=
    operand    := IDENT | INTEGER | STRING

Expressions are evaluated once per timestamp instant against the fields of
:func:`field_values`. Types are checked when the expression is parsed, so a
bad filter fails before any record is read.
"""

from __future__ import annotations

import operator
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from bodytimeline.core.errors import FilterCompilationError
from bodytimeline.core.time_utils import WEEKDAY_NAMES, from_unix

FIELD_TYPES: Dict[str, type] = {
    "date": int,
    "year": int,
    "month": int,
    "day": int,
    "hour": int,
    "minute": int,
    "second": int,
    "weekday": str,
}

COMPARISONS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
}

_KEYWORDS = {"and": "&&", "or": "||", "not": "!"}

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<ws>\s+)
    |(?P<op>&&|\|\||==|!=|>=|<=|<|>|!|\(|\))
    |(?P<int>-?[0-9]+)
    |(?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
    |(?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class Token:
    kind: str
    value: Any
    position: int


def tokenize(source: str) -> List[Token]:
    tokens: List[Token] = []
    position = 0
    while position < len(source):
        match = _TOKEN_PATTERN.match(source, position)
        if match is None:
            raise FilterCompilationError(
                f"unexpected character {source[position]!r} at position {position}"
            )
        kind = match.lastgroup
        text = match.group()
        if kind == "int":
            tokens.append(Token("literal", int(text), position))
        elif kind == "string":
            tokens.append(Token("literal", _unquote(text), position))
        elif kind == "ident":
            keyword = _KEYWORDS.get(text.lower())
            if keyword:
                tokens.append(Token("op", keyword, position))
            else:
                tokens.append(Token("ident", text, position))
        elif kind == "op":
            tokens.append(Token("op", text, position))
        position = match.end()
    return tokens


def _unquote(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text[1:-1])


# ----------------------------------------------------------------------
# Syntax tree
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class Field:
    name: str

    @property
    def value_type(self) -> type:
        return FIELD_TYPES[self.name]

    def resolve(self, env: Dict[str, Any]) -> Any:
        return env[self.name]


@dataclass(frozen=True)
class Literal:
    value: Union[int, str]

    @property
    def value_type(self) -> type:
        return type(self.value)

    def resolve(self, env: Dict[str, Any]) -> Any:
        return self.value


Operand = Union[Field, Literal]


@dataclass(frozen=True)
class Comparison:
    left: Operand
    op: str
    right: Operand

    def evaluate(self, env: Dict[str, Any]) -> bool:
        left = self.left.resolve(env)
        right = self.right.resolve(env)
        if isinstance(left, str):
            left, right = left.casefold(), right.casefold()
        return COMPARISONS[self.op](left, right)


@dataclass(frozen=True)
class Not:
    operand: "Node"

    def evaluate(self, env: Dict[str, Any]) -> bool:
        return not self.operand.evaluate(env)


@dataclass(frozen=True)
class And:
    operands: Tuple["Node", ...]

    def evaluate(self, env: Dict[str, Any]) -> bool:
        return all(node.evaluate(env) for node in self.operands)


@dataclass(frozen=True)
class Or:
    operands: Tuple["Node", ...]

    def evaluate(self, env: Dict[str, Any]) -> bool:
        return any(node.evaluate(env) for node in self.operands)


Node = Union[Comparison, Not, And, Or]


class _Parser:
    def __init__(self, source: str):
        self.source = source
        self.tokens = tokenize(source)
        self.index = 0

    def parse(self) -> Node:
        if not self.tokens:
            raise FilterCompilationError("empty filter expression")
        node = self._or()
        if self.index < len(self.tokens):
            token = self.tokens[self.index]
            raise FilterCompilationError(
                f"unexpected {token.value!r} at position {token.position}"
            )
        return node

    def _peek(self) -> Optional[Token]:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def _advance(self) -> Token:
        token = self._peek()
        if token is None:
            raise FilterCompilationError("unexpected end of filter expression")
        self.index += 1
        return token

    def _accept(self, value: str) -> bool:
        token = self._peek()
        if token is not None and token.kind == "op" and token.value == value:
            self.index += 1
            return True
        return False

    def _or(self) -> Node:
        operands = [self._and()]
        while self._accept("||"):
            operands.append(self._and())
        return operands[0] if len(operands) == 1 else Or(tuple(operands))

    def _and(self) -> Node:
        operands = [self._unary()]
        while self._accept("&&"):
            operands.append(self._unary())
        return operands[0] if len(operands) == 1 else And(tuple(operands))

    def _unary(self) -> Node:
        if self._accept("!"):
            return Not(self._unary())
        if self._accept("("):
            node = self._or()
            if not self._accept(")"):
                raise FilterCompilationError("missing closing parenthesis")
            return node
        return self._comparison()

    def _comparison(self) -> Comparison:
        left = self._operand()
        token = self._peek()
        if token is None or token.kind != "op" or token.value not in COMPARISONS:
            raise FilterCompilationError(
                f"expected a comparison operator after {self._describe(left)}"
            )
        self.index += 1
        right = self._operand()
        if left.value_type is not right.value_type:
            raise FilterCompilationError(
                f"cannot compare {self._describe(left)} with {self._describe(right)}"
            )
        return Comparison(left, token.value, right)

    def _operand(self) -> Operand:
        token = self._advance()
        if token.kind == "literal":
            return Literal(token.value)
        if token.kind == "ident":
            if token.value not in FIELD_TYPES:
                known = ", ".join(sorted(FIELD_TYPES))
                raise FilterCompilationError(
                    f"unknown field {token.value!r} (known fields: {known})"
                )
            return Field(token.value)
        raise FilterCompilationError(
            f"unexpected {token.value!r} at position {token.position}"
        )

    @staticmethod
    def _describe(operand: Operand) -> str:
        if isinstance(operand, Field):
            return f"field {operand.name!r}"
        return f"value {operand.value!r}"


@dataclass(frozen=True)
class FilterExpression:
    """A parsed filter, evaluated unchanged for the whole run."""

    source: str
    root: Node

    def matches(self, env: Dict[str, Any]) -> bool:
        return self.root.evaluate(env)

    def matches_instant(self, instant: int, timezone_name: Optional[str] = None) -> bool:
        return self.matches(field_values(instant, timezone_name))


def parse_expression(source: str) -> FilterExpression:
    """Parse a compiled filter string.

    Raises:
        FilterCompilationError: syntax errors, unknown fields and type
            mismatches.
    """

    return FilterExpression(source=source, root=_Parser(source).parse())


def field_values(instant: int, timezone_name: Optional[str] = None) -> Dict[str, Any]:
    """Return the filter fields of ``instant`` in the display timezone."""

    moment = from_unix(instant, timezone_name)
    return {
        "date": instant,
        "year": moment.year,
        "month": moment.month,
        "day": moment.day,
        "hour": moment.hour,
        "minute": moment.minute,
        "second": moment.second,
        "weekday": WEEKDAY_NAMES[moment.weekday()],
    }


def all_match(
    expressions: Sequence[FilterExpression], instant: int, timezone_name: Optional[str]
) -> bool:
    if not expressions:
        return True
    env = field_values(instant, timezone_name)
    return all(expression.matches(env) for expression in expressions)


__all__ = [
    "FIELD_TYPES",
    "FilterExpression",
    "all_match",
    "field_values",
    "parse_expression",
    "tokenize",
]
