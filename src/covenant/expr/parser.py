"""
Annotation payload parser.

Invariant payloads are strings written in Python expression syntax. They are
parsed with Python's own expression grammar (`ast.parse(mode="eval")`) and
converted into the closed expression grammar of `covenant.expr.nodes`.

Operators are carried over by their source spelling whether or not a
translation exists for them; the translator decides what is supported. Syntax
with no counterpart in the grammar at all (calls, subscripts, lambdas, ...)
is rejected here.
"""
import ast
from typing import Any

from ..diagnostics import AnnotationParseError, UnsupportedConstructError
from .nodes import BinaryOp, ExpressionNode, FieldAccess, Identifier, Literal, UnaryOp


_BIN_OPS = {
    ast.Add: "+",
    ast.Sub: "-",
    ast.Mult: "*",
    ast.Div: "/",
    ast.Mod: "%",
    ast.FloorDiv: "//",
    ast.Pow: "**",
    ast.LShift: "<<",
    ast.RShift: ">>",
    ast.BitOr: "|",
    ast.BitXor: "^",
    ast.BitAnd: "&",
    ast.MatMult: "@",
}

_CMP_OPS = {
    ast.Eq: "==",
    ast.NotEq: "!=",
    ast.Lt: "<",
    ast.LtE: "<=",
    ast.Gt: ">",
    ast.GtE: ">=",
    ast.Is: "is",
    ast.IsNot: "is not",
    ast.In: "in",
    ast.NotIn: "not in",
}

_BOOL_OPS = {
    ast.And: "and",
    ast.Or: "or",
}

_UNARY_OPS = {
    ast.Not: "not",
    ast.USub: "-",
    ast.UAdd: "+",
    ast.Invert: "~",
}


MAX_DEPTH = 200


def _op_symbol(table: dict, op: ast.AST) -> str:
    return table.get(type(op), type(op).__name__)


def tree_depth(root: ExpressionNode) -> int:
    """Depth of an expression tree, computed without recursion."""
    depth = 0
    stack = [(root, 1)]
    while stack:
        node, level = stack.pop()
        depth = max(depth, level)
        if isinstance(node, BinaryOp):
            stack.append((node.left, level + 1))
            stack.append((node.right, level + 1))
        elif isinstance(node, UnaryOp):
            stack.append((node.operand, level + 1))
        elif isinstance(node, FieldAccess):
            stack.append((node.base, level + 1))
    return depth


class AnnotationParser:
    """Converts one invariant payload into an expression tree."""

    def parse(self, payload: Any) -> ExpressionNode:
        """Parse an invariant payload.

        Args:
            payload: Invariant source text

        Returns:
            Root of the expression tree

        Raises:
            AnnotationParseError: Payload is not a string or not valid syntax
            UnsupportedConstructError: Payload uses syntax outside the grammar
        """
        if not isinstance(payload, str):
            raise AnnotationParseError(
                f"Invariant payload must be a string, got {type(payload).__name__}",
                repr(payload))

        source = payload.strip()
        if not source:
            raise AnnotationParseError("Empty invariant expression", source)

        try:
            tree = ast.parse(source, mode="eval")
            root = self._convert(tree.body, source)
        except SyntaxError as e:
            offset = e.offset - 1 if e.offset else None
            raise AnnotationParseError(f"Invalid invariant syntax: {e.msg}", source, offset) from e
        except RecursionError as e:
            raise UnsupportedConstructError("Invariant expression nests too deeply", source) from e

        # Translation and evaluation recurse once per level
        if tree_depth(root) > MAX_DEPTH:
            raise UnsupportedConstructError(
                f"Invariant expression nests too deeply (more than {MAX_DEPTH} levels)", source)
        return root

    def _convert(self, node: ast.AST, source: str) -> ExpressionNode:
        if isinstance(node, ast.BinOp):
            return BinaryOp(
                _op_symbol(_BIN_OPS, node.op),
                self._convert(node.left, source),
                self._convert(node.right, source))

        elif isinstance(node, ast.BoolOp):
            # a and b and c -> ((a and b) and c)
            op = _op_symbol(_BOOL_OPS, node.op)
            result = self._convert(node.values[0], source)
            for value in node.values[1:]:
                result = BinaryOp(op, result, self._convert(value, source))
            return result

        elif isinstance(node, ast.Compare):
            return self._convert_compare(node, source)

        elif isinstance(node, ast.UnaryOp):
            return UnaryOp(_op_symbol(_UNARY_OPS, node.op), self._convert(node.operand, source))

        elif isinstance(node, ast.Attribute):
            return FieldAccess(self._convert(node.value, source), node.attr)

        elif isinstance(node, ast.Name):
            return Identifier(node.id)

        elif isinstance(node, ast.Constant):
            return Literal(node.value)

        raise UnsupportedConstructError(
            f"Unsupported expression syntax: {type(node).__name__}",
            source,
            getattr(node, "col_offset", None))

    def _convert_compare(self, node: ast.Compare, source: str) -> ExpressionNode:
        # a < b <= c -> (a < b) and (b <= c)
        operands = [self._convert(node.left, source)]
        operands.extend(self._convert(c, source) for c in node.comparators)

        result = None
        for i, op in enumerate(node.ops):
            cmp = BinaryOp(_op_symbol(_CMP_OPS, op), operands[i], operands[i + 1])
            result = cmp if result is None else BinaryOp("and", result, cmp)
        return result


def parse_invariant(payload: Any) -> ExpressionNode:
    """Parse an invariant payload string into an expression tree."""
    return AnnotationParser().parse(payload)
