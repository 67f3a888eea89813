"""
Expression grammar for invariant annotations.

The grammar is a closed set of node kinds. Anything the annotation parser
cannot express with these five node types is rejected before it reaches the
translator.
"""
from dataclasses import dataclass
from typing import Any, List, Union


@dataclass(frozen=True)
class BinaryOp:
    """Binary operation.

    Attributes:
        op: Operator as spelled in the source (e.g. '+', '>=', 'and', '^')
        left: Left operand
        right: Right operand
    """
    op: str
    left: "ExpressionNode"
    right: "ExpressionNode"


@dataclass(frozen=True)
class UnaryOp:
    """Unary operation ('not', '-', and the unsupported '~' / '+')."""
    op: str
    operand: "ExpressionNode"


@dataclass(frozen=True)
class FieldAccess:
    """Attribute access `base.field`."""
    base: "ExpressionNode"
    field: str


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class Literal:
    """Constant value. Only int and bool literals are translatable."""
    value: Any

    @property
    def kind(self) -> str:
        if isinstance(self.value, bool):
            return "bool"
        if isinstance(self.value, int):
            return "int"
        return type(self.value).__name__


ExpressionNode = Union[BinaryOp, UnaryOp, FieldAccess, Identifier, Literal]

SELF_NAME = "self"


def referenced_names(node: ExpressionNode) -> List[str]:
    """Names an expression refers to, as they appear in its SMT-LIB form.

    `self.x` contributes `x`, a bare identifier contributes itself. Order of
    first appearance is kept and duplicates are dropped.
    """
    names: List[str] = []
    _collect_names(node, names)
    return names


def _collect_names(node: ExpressionNode, names: List[str]) -> None:
    if isinstance(node, BinaryOp):
        _collect_names(node.left, names)
        _collect_names(node.right, names)
    elif isinstance(node, UnaryOp):
        _collect_names(node.operand, names)
    elif isinstance(node, FieldAccess):
        name = self_field_name(node)
        if name is not None and name not in names:
            names.append(name)
    elif isinstance(node, Identifier):
        if node.name not in names:
            names.append(node.name)


def self_field_name(node: FieldAccess) -> Union[str, None]:
    """Return the field name if `node` is exactly `self.<field>`, else None."""
    if isinstance(node.base, Identifier) and node.base.name == SELF_NAME:
        return node.field
    return None
