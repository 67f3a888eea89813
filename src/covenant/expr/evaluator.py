"""
Runtime interpretation of invariant expressions against live instances.
"""
import operator
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from ..diagnostics import CovenantError
from .nodes import BinaryOp, ExpressionNode, FieldAccess, Identifier, Literal, UnaryOp, self_field_name


class EvaluationError(CovenantError):
    """An invariant could not be evaluated (unsupported node or missing value)."""


_BINARY: Dict[str, Callable[[Any, Any], Any]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "%": operator.mod,
}

_UNARY: Dict[str, Callable[[Any], Any]] = {
    "not": operator.not_,
    "-": operator.neg,
}


class Evaluator:
    """Evaluates expression trees against an instance.

    Bare identifiers resolve to a field of the instance when `fields` names
    them, otherwise to an entry in `constants`.
    """

    def __init__(self, fields: Sequence[str] = (), constants: Optional[Mapping[str, Any]] = None):
        self.fields = frozenset(fields)
        self.constants = dict(constants or {})

    def evaluate(self, node: ExpressionNode, instance: Any) -> Any:
        if isinstance(node, BinaryOp):
            # Short-circuit like Python so guards such as `self.d != 0 and ...` hold
            if node.op == "and":
                return bool(self.evaluate(node.left, instance)) and bool(self.evaluate(node.right, instance))
            if node.op == "or":
                return bool(self.evaluate(node.left, instance)) or bool(self.evaluate(node.right, instance))
            fn = _BINARY.get(node.op)
            if fn is None:
                raise EvaluationError(f"Cannot evaluate binary operator: {node.op}")
            return fn(self.evaluate(node.left, instance), self.evaluate(node.right, instance))

        elif isinstance(node, UnaryOp):
            fn = _UNARY.get(node.op)
            if fn is None:
                raise EvaluationError(f"Cannot evaluate unary operator: {node.op}")
            return fn(self.evaluate(node.operand, instance))

        elif isinstance(node, FieldAccess):
            name = self_field_name(node)
            if name is None:
                raise EvaluationError("Only self.field access can be evaluated")
            return self._field_value(instance, name)

        elif isinstance(node, Identifier):
            if node.name in self.fields:
                return self._field_value(instance, node.name)
            if node.name in self.constants:
                return self.constants[node.name]
            raise EvaluationError(f"Unresolved name: '{node.name}'")

        elif isinstance(node, Literal):
            return node.value

        raise EvaluationError(f"Unknown expression node: {type(node).__name__}")

    def holds(self, node: ExpressionNode, instance: Any) -> bool:
        return bool(self.evaluate(node, instance))

    @staticmethod
    def _field_value(instance: Any, name: str) -> Any:
        try:
            return getattr(instance, name)
        except AttributeError as e:
            raise EvaluationError(f"Instance has no field '{name}'") from e
