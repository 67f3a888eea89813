"""
Invariant expression grammar, payload parser and runtime evaluator.
"""

from .nodes import (
    BinaryOp,
    UnaryOp,
    FieldAccess,
    Identifier,
    Literal,
    ExpressionNode,
    referenced_names,
)
from .parser import AnnotationParser, parse_invariant
from .evaluator import Evaluator, EvaluationError

__all__ = [
    "BinaryOp",
    "UnaryOp",
    "FieldAccess",
    "Identifier",
    "Literal",
    "ExpressionNode",
    "referenced_names",
    "AnnotationParser",
    "parse_invariant",
    "Evaluator",
    "EvaluationError",
]
