"""Evaluation of the rule and top-level expressions used by POC files."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Mapping


class ExpressionError(ValueError):
    """Raised when an expression cannot be understood or evaluated."""


@dataclass
class ResponseView:
    """The parts of an HTTP response that rule expressions can refer to.

    Header names are expected in lower case.
    """

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    content_type: str = ""

    @property
    def body_string(self) -> str:
        """Alias of ``body``."""
        return self.body


_HEADER_EQUALS = re.compile(r'response\.headers\["([^"]+)"\]\s*==\s*"([^"]*)"')
_HEADER_IN = re.compile(r'"([^"]+)"\s+in\s+response\.headers')
_CONTENT_TYPE_CONTAINS = re.compile(r'response\.content_type\.contains\("([^"]+)"\)')
_BODY_BCONTAINS = re.compile(r'response\.body\.bcontains\(b"((?:\\.|[^"])*)"\)')
_PATTERN_MATCHES_BODY = re.compile(r'"([^"]+)"\.matches\(response\.body[_a-z]*\)')
_PATTERN_BMATCHES_BODY = re.compile(r'"([^"]+)"\.bmatches\(response\.body[_a-z]*\)')
_BODY_MATCHES_PATTERN = re.compile(r'response\.body[_a-z]*\.matches\("([^"]+)"\)')
_BODY_BMATCHES_PATTERN = re.compile(r'response\.body[_a-z]*\.bmatches\("([^"]+)"\)')
_INTEGER = re.compile(r"[+-]?[0-9]+")


def _search_body(pattern: str, body: str) -> bool:
    try:
        return re.search(pattern, body) is not None
    except re.error as exc:
        raise ExpressionError(f"invalid regular expression: {exc}") from exc


def evaluate_expression(expr: str, response: ResponseView) -> bool:
    """Evaluate a rule expression against a response."""
    expr = expr.strip().replace("\n", " ").replace("\r", "")

    if expr == "true":
        return True
    if expr == "false":
        return False

    if "&&" in expr:
        return all(evaluate_expression(part.strip(), response) for part in expr.split("&&"))
    if "||" in expr:
        return any(evaluate_expression(part.strip(), response) for part in expr.split("||"))

    expr = expr.strip()

    # Reverse connections are not supported.
    if "reverse.wait" in expr:
        return False

    if expr.startswith("response.status"):
        return evaluate_numeric_comparison(expr, response.status)

    if "response.headers[" in expr:
        match = _HEADER_EQUALS.search(expr)
        if match:
            actual = response.headers.get(match.group(1).lower())
            return actual is not None and actual == match.group(2)

    if "in response.headers" in expr:
        match = _HEADER_IN.search(expr)
        if match:
            return match.group(1).lower() in response.headers

    if "response.content_type.contains" in expr:
        match = _CONTENT_TYPE_CONTAINS.search(expr)
        if match:
            return match.group(1).lower() in response.content_type.lower()

    if 'response.body.bcontains(b"' in expr:
        match = _BODY_BCONTAINS.search(expr)
        if match:
            needle = match.group(1).replace('\\"', '"')
            return needle in response.body

    # Byte expressions built with bytes(...) are not supported.
    if "response.body.bcontains(bytes(" in expr:
        return False

    if ".matches(response.body" in expr:
        match = _PATTERN_MATCHES_BODY.search(expr)
        if match:
            return _search_body(match.group(1), response.body_string)

    if ".bmatches(response.body" in expr:
        match = _PATTERN_BMATCHES_BODY.search(expr)
        if match:
            return _search_body(match.group(1), response.body_string)

    if "response.body" in expr and ".matches(" in expr:
        match = _BODY_MATCHES_PATTERN.search(expr)
        if match:
            return _search_body(match.group(1), response.body_string)

    if "response.body" in expr and ".bmatches(" in expr:
        match = _BODY_BMATCHES_PATTERN.search(expr)
        if match:
            return _search_body(match.group(1), response.body_string)

    raise ExpressionError(f"cannot parse expression: {expr}")


def _expected_integer(expr: str, operator: str) -> int:
    parts = expr.split(operator)
    if len(parts) != 2:
        raise ExpressionError(f"invalid comparison expression: {expr}")
    text = parts[1].strip()
    if not _INTEGER.fullmatch(text):
        raise ExpressionError(f"cannot parse number: {text}")
    return int(text)


def evaluate_numeric_comparison(expr: str, actual: int) -> bool:
    """Evaluate an ``==`` or ``!=`` comparison of ``actual`` with an integer."""
    if "==" in expr:
        return actual == _expected_integer(expr, "==")
    if "!=" in expr:
        return actual != _expected_integer(expr, "!=")
    raise ExpressionError(f"unsupported comparison operator: {expr}")


def evaluate_top_level_expression(expression: str, rule_results: Mapping[str, bool]) -> bool:
    """Evaluate an expression such as ``r0() && r1()`` from rule outcomes."""
    expression = expression.strip().replace("\n", "").replace("\r", "")
    for name, result in rule_results.items():
        expression = expression.replace(f"{name}()", "true" if result else "false")
    return evaluate_boolean_expression(expression)


def evaluate_boolean_expression(expression: str) -> bool:
    """Evaluate ``true``/``false`` literals joined by ``&&`` and ``||``."""
    expr = expression.strip()
    for char in (" ", "\n", "\r", "\t"):
        expr = expr.replace(char, "")

    if "&&" in expr:
        return all(evaluate_boolean_expression(part) for part in expr.split("&&"))
    if "||" in expr:
        return any(evaluate_boolean_expression(part) for part in expr.split("||"))

    if expr == "true":
        return True
    if expr == "false":
        return False
    raise ExpressionError(f"cannot parse expression: {expr}")