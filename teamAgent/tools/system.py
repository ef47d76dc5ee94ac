"""Globally available, read-only tools."""

from __future__ import annotations

import ast
import operator as op
from datetime import datetime, timezone

from langchain_core.tools import tool

from teamAgent.utils.error_handler import ToolExecutionError

_ALLOWED_OPS = {
    ast.Add: op.add,
    ast.Sub: op.sub,
    ast.Mult: op.mul,
    ast.Div: op.truediv,
    ast.FloorDiv: op.floordiv,
    ast.Mod: op.mod,
    ast.USub: op.neg,
    ast.UAdd: op.pos,
}

MAX_EXPONENT = 10_000
MAX_RESULT_BITS = 10_000


def _power(base, exponent):
    if abs(exponent) > MAX_EXPONENT:
        raise ToolExecutionError(f"Exponent too large: {exponent}")
    if isinstance(base, int) and isinstance(exponent, int) and base.bit_length() * abs(exponent) > MAX_RESULT_BITS:
        raise ToolExecutionError("Result too large")
    return op.pow(base, exponent)


def _eval(node: ast.AST):
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return node.value
    if isinstance(node, ast.UnaryOp) and type(node.op) in _ALLOWED_OPS:
        return _ALLOWED_OPS[type(node.op)](_eval(node.operand))
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.Pow):
        return _power(_eval(node.left), _eval(node.right))
    if isinstance(node, ast.BinOp) and type(node.op) in _ALLOWED_OPS:
        return _ALLOWED_OPS[type(node.op)](_eval(node.left), _eval(node.right))
    raise ToolExecutionError(f"Unsupported expression element: {type(node).__name__}")


@tool
def now() -> str:
    """Return current UTC datetime."""

    return datetime.now(timezone.utc).isoformat()


@tool
def calc(expression: str) -> str:
    """Evaluate a safe arithmetic expression, e.g. "(3 + 4) * 2"."""

    node = ast.parse(expression, mode="eval").body
    return str(_eval(node))


def default_tools():
    """Default global tool set."""

    return [now, calc]
