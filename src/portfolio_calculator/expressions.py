"""
Restricted arithmetic expressions for price and quantity inputs.

Inputs such as "1500/12" or "(100 + 20) * 3" are parsed by a small
recursive-descent parser. Only numeric literals, + - * /, unary signs and
parentheses are accepted:

    expression := term (("+" | "-") term)*
    term       := factor (("*" | "/") factor)*
    factor     := ("+" | "-") factor | NUMBER | "(" expression ")"
    NUMBER     := digits ["." digits] | "." digits
"""

import math
import re
from typing import List, Optional, Tuple

from .exceptions import ExpressionError

MAX_EXPRESSION_LENGTH = 256
MAX_NESTING_DEPTH = 32

_TOKEN_PATTERN = re.compile(r"\s*(?:(\d+\.\d*|\.\d+|\d+)|(.))")
_OPERATORS = set("+-*/()")


def _tokenize(text: str) -> List[Tuple[str, str]]:
    tokens = []
    for number, symbol in _TOKEN_PATTERN.findall(text):
        if number:
            tokens.append(("number", number))
        elif symbol in _OPERATORS:
            tokens.append(("op", symbol))
        elif symbol.strip():
            raise ExpressionError(f"Unexpected character {symbol!r} in expression")
    return tokens


class _Parser:

    def __init__(self, tokens: List[Tuple[str, str]]):
        self.tokens = tokens
        self.position = 0
        self.depth = 0

    def _peek(self) -> Optional[Tuple[str, str]]:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def _next(self) -> Tuple[str, str]:
        token = self._peek()
        if token is None:
            raise ExpressionError("Unexpected end of expression")
        self.position += 1
        return token

    def parse(self) -> float:
        value = self._expression()
        if self._peek() is not None:
            raise ExpressionError(f"Unexpected token {self._peek()[1]!r} in expression")
        return value

    def _expression(self) -> float:
        value = self._term()
        while self._peek() in (("op", "+"), ("op", "-")):
            _, op = self._next()
            right = self._term()
            value = value + right if op == "+" else value - right
        return value

    def _term(self) -> float:
        value = self._factor()
        while self._peek() in (("op", "*"), ("op", "/")):
            _, op = self._next()
            right = self._factor()
            if op == "*":
                value = value * right
            elif right == 0:
                raise ExpressionError("Division by zero in expression")
            else:
                value = value / right
        return value

    def _factor(self) -> float:
        kind, text = self._next()
        if kind == "number":
            return float(text)
        if text in "+-":
            self._enter()
            value = self._factor()
            self.depth -= 1
            return value if text == "+" else -value
        if text == "(":
            self._enter()
            value = self._expression()
            if self._next() != ("op", ")"):
                raise ExpressionError("Missing closing parenthesis in expression")
            self.depth -= 1
            return value
        raise ExpressionError(f"Unexpected token {text!r} in expression")

    def _enter(self):
        self.depth += 1
        if self.depth > MAX_NESTING_DEPTH:
            raise ExpressionError(f"Expression nested deeper than {MAX_NESTING_DEPTH} levels")


def evaluate_expression(text: str) -> float:
    """Evaluate an arithmetic expression, raising ExpressionError if it is not valid"""
    if not isinstance(text, str):
        raise ExpressionError("Expression must be a string")
    if len(text) > MAX_EXPRESSION_LENGTH:
        raise ExpressionError(f"Expression longer than {MAX_EXPRESSION_LENGTH} characters")

    tokens = _tokenize(text)
    if not tokens:
        raise ExpressionError("Expression is empty")

    value = _Parser(tokens).parse()
    if not math.isfinite(value):
        raise ExpressionError("Expression result is not a finite number")
    return value
