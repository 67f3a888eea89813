"""
Invariant expression to SMT-LIB translator.

Translates expression trees into SMT-LIB S-expressions over integer and
boolean theories:

    self.a + self.b > self.c   ->   (> (+ a b) c)

Every call returns a fresh `TranslationResult`. Children are translated
independently and a parent only builds its string when no child reported an
error; otherwise it returns the union of the children's errors and no output.
"""
from dataclasses import dataclass
from typing import Sequence, Tuple
import logging

from ..expr.nodes import (
    BinaryOp, ExpressionNode, FieldAccess, Identifier, Literal, UnaryOp, self_field_name,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranslationResult:
    """Outcome of translating one expression node.

    Attributes:
        output: SMT-LIB fragment (empty when errors are present)
        errors: Descriptions of unsupported constructs found in the subtree
    """
    output: str = ""
    errors: Tuple[str, ...] = ()

    @classmethod
    def success(cls, output: str) -> "TranslationResult":
        return cls(output=output)

    @classmethod
    def failure(cls, errors: Sequence[str]) -> "TranslationResult":
        return cls(output="", errors=tuple(errors))

    @property
    def ok(self) -> bool:
        return not self.errors


# Source operator -> SMT-LIB function symbol
BINARY_OPS = {
    "==": "=",
    "!=": "distinct",
    "<": "<",
    "<=": "<=",
    ">": ">",
    ">=": ">=",
    "+": "+",
    "-": "-",
    "*": "*",
    "/": "/",
    "%": "mod",
    "and": "and",
    "or": "or",
}

UNARY_OPS = {
    "not": "not",
    "-": "-",
}


def describe(node: ExpressionNode) -> str:
    """Render a node back into readable source form for error messages."""
    if isinstance(node, BinaryOp):
        return f"{describe(node.left)} {node.op} {describe(node.right)}"
    elif isinstance(node, UnaryOp):
        sep = " " if node.op.isalpha() else ""
        return f"{node.op}{sep}{describe(node.operand)}"
    elif isinstance(node, FieldAccess):
        return f"{describe(node.base)}.{node.field}"
    elif isinstance(node, Identifier):
        return node.name
    elif isinstance(node, Literal):
        return repr(node.value)
    return type(node).__name__


class ExprToSMTTranslator:
    """Translates invariant expression trees to SMT-LIB strings.

    The translator holds no state between calls; one instance can be shared
    freely.
    """

    def translate(self, expr: ExpressionNode) -> TranslationResult:
        """Translate an expression.

        Args:
            expr: Root of the expression tree

        Returns:
            TranslationResult with either output or a non-empty error list
        """
        if isinstance(expr, BinaryOp):
            return self.translate_bin(expr)
        elif isinstance(expr, UnaryOp):
            return self.translate_unary(expr)
        elif isinstance(expr, FieldAccess):
            return self.translate_field_access(expr)
        elif isinstance(expr, Identifier):
            return self.translate_identifier(expr)
        elif isinstance(expr, Literal):
            return self.translate_literal(expr)
        else:
            return TranslationResult.failure(
                [f"Unsupported expression type: {type(expr).__name__}"])

    def translate_bin(self, expr: BinaryOp) -> TranslationResult:
        lhs = self.translate(expr.left)
        rhs = self.translate(expr.right)

        errors = list(lhs.errors) + list(rhs.errors)
        smt_op = BINARY_OPS.get(expr.op)
        if smt_op is None:
            errors.append(f"Unsupported binary operator: {expr.op}")

        if errors:
            return TranslationResult.failure(errors)
        return TranslationResult.success(f"({smt_op} {lhs.output} {rhs.output})")

    def translate_unary(self, expr: UnaryOp) -> TranslationResult:
        operand = self.translate(expr.operand)

        errors = list(operand.errors)
        smt_op = UNARY_OPS.get(expr.op)
        if smt_op is None:
            errors.append(f"Unsupported unary operator: {expr.op}")

        if errors:
            return TranslationResult.failure(errors)
        return TranslationResult.success(f"({smt_op} {operand.output})")

    def translate_field_access(self, expr: FieldAccess) -> TranslationResult:
        name = self_field_name(expr)
        if name is None:
            return TranslationResult.failure(
                [f"Only self.field access is supported, got: {describe(expr)}"])
        return TranslationResult.success(name)

    def translate_identifier(self, expr: Identifier) -> TranslationResult:
        return TranslationResult.success(expr.name)

    def translate_literal(self, expr: Literal) -> TranslationResult:
        value = expr.value
        if isinstance(value, bool):
            return TranslationResult.success("true" if value else "false")
        elif isinstance(value, int):
            # SMT-LIB numerals are non-negative
            if value < 0:
                return TranslationResult.success(f"(- {-value})")
            return TranslationResult.success(str(value))
        return TranslationResult.failure(
            [f"Unsupported literal: {value!r} ({expr.kind})"])


_translator = ExprToSMTTranslator()


def translate(expr: ExpressionNode) -> TranslationResult:
    """Translate an expression tree with a shared translator."""
    result = _translator.translate(expr)
    if result.ok:
        logger.debug("Translated %s -> %s", describe(expr), result.output)
    else:
        logger.debug("Translation of %s failed: %s", describe(expr), "; ".join(result.errors))
    return result


def to_assertion(logic: str) -> str:
    """Wrap a translated invariant as an SMT-LIB assertion."""
    return f"(assert {logic})"
