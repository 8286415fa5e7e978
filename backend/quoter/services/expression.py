"""Arithmetic evaluation for price fields entered as formulas (``=120*1.18``).

Only numeric literals, parentheses, unary +/- and the four basic operators are
accepted. The expression is parsed with :mod:`ast` and walked by hand; nothing
else in the process is reachable from it.

Evaluation is fail-soft: anything that cannot be evaluated to a finite number
gives ``0.0`` so that a bad formula never blocks the form.
"""
import ast
import logging
import math
import operator
from typing import Union

from quoter.models.quote import FORMULA_MARKER

logger = logging.getLogger(__name__)

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

MAX_EXPRESSION_LENGTH = 500


class UnsupportedExpression(Exception):
    pass


def _eval_node(node: ast.AST) -> Union[int, float]:
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)
    if isinstance(node, ast.Constant):
        # bool is a subclass of int
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise UnsupportedExpression(f"unsupported literal {node.value!r}")
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        return _BINARY_OPS[type(node.op)](_eval_node(node.left), _eval_node(node.right))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    raise UnsupportedExpression(f"unsupported syntax: {type(node).__name__}")


def evaluate(expression: str) -> float:
    text = (expression or "").strip()
    if text.startswith(FORMULA_MARKER):
        text = text[len(FORMULA_MARKER):].strip()
    if not text or len(text) > MAX_EXPRESSION_LENGTH:
        logger.warning("Rejected expression of length %s", len(text))
        return 0.0

    try:
        tree = ast.parse(text, mode="eval")
        result = float(_eval_node(tree))
    except (SyntaxError, UnsupportedExpression, ZeroDivisionError, OverflowError, RecursionError, ValueError) as e:
        logger.warning("Failed to evaluate expression %r: %s", expression, e)
        return 0.0

    if math.isnan(result) or math.isinf(result):
        logger.warning("Expression %r evaluated to a non-finite value", expression)
        return 0.0
    return result
