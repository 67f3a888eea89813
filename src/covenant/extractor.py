"""
Invariant extraction.

Walks a type declaration, parses every invariant payload, resolves the names
it refers to and translates it. Parse and resolution failures are fatal for
the whole type; they are collected and raised together.
"""
from typing import Any, Collection, List, Mapping, Optional
import logging

from .diagnostics import DiagnosticReporter, InvariantBuildError, UnresolvedFieldError
from .expr.nodes import BinaryOp, ExpressionNode, FieldAccess, Identifier, UnaryOp, self_field_name
from .expr.parser import AnnotationParser
from .model import AnnotatedType, InvariantExpression, TypeDeclaration
from .translator.expr_translator import ExprToSMTTranslator

logger = logging.getLogger(__name__)


def find_unresolved(node: ExpressionNode, fields: Collection[str],
                    constants: Mapping[str, Any]) -> List[str]:
    """Return the names in `node` that are neither fields nor constants.

    `self.x` entries are reported as 'self.x'. Field paths that are not
    `self.<field>` are left for the translator to reject.
    """
    if isinstance(node, BinaryOp):
        return (find_unresolved(node.left, fields, constants)
                + find_unresolved(node.right, fields, constants))
    elif isinstance(node, UnaryOp):
        return find_unresolved(node.operand, fields, constants)
    elif isinstance(node, FieldAccess):
        name = self_field_name(node)
        if name is not None and name not in fields:
            return [f"self.{name}"]
        return []
    elif isinstance(node, Identifier):
        if node.name in fields or node.name in constants:
            return []
        return [node.name]
    return []


class InvariantExtractor:
    """Extracts and translates the invariants of one type declaration."""

    def __init__(self,
                 parser: Optional[AnnotationParser] = None,
                 translator: Optional[ExprToSMTTranslator] = None):
        self.parser = parser or AnnotationParser()
        self.translator = translator or ExprToSMTTranslator()

    def extract(self, decl: TypeDeclaration) -> AnnotatedType:
        """Extract all invariants of a type.

        Args:
            decl: Type declaration with invariant payloads

        Returns:
            AnnotatedType holding one InvariantExpression per payload

        Raises:
            GenerationError: Any payload failed to parse or resolve
        """
        reporter = DiagnosticReporter(decl.name)
        field_names = [f.name for f in decl.fields]
        invariants: List[InvariantExpression] = []

        # Field-level invariants in field order, then type-level
        payloads = [(f.name, p) for f in decl.fields for p in f.invariants]
        payloads.extend((None, p) for p in decl.invariants)

        for field_name, payload in payloads:
            inv = self._extract_one(payload, field_name, field_names, decl.constants, reporter)
            if inv is not None:
                invariants.append(inv)

        reporter.raise_if_errors()

        logger.debug("Extracted %d invariant(s) from '%s'", len(invariants), decl.name)
        return AnnotatedType(
            name=decl.name,
            fields=tuple((f.name, f.type) for f in decl.fields),
            invariants=tuple(invariants),
            constants=dict(decl.constants),
        )

    def _extract_one(self, payload: Any, field_name: Optional[str], field_names: List[str],
                     constants: Mapping[str, Any],
                     reporter: DiagnosticReporter) -> Optional[InvariantExpression]:
        try:
            ast = self.parser.parse(payload)
        except InvariantBuildError as e:
            reporter.report_error(e, field_name)
            return None

        source = payload.strip()
        unresolved = find_unresolved(ast, field_names, constants)
        for name in dict.fromkeys(unresolved):
            reporter.report_error(UnresolvedFieldError(
                name, source,
                f"Unresolved field: '{name}' is not declared on '{reporter.type_name}'"), field_name)
        if unresolved:
            return None

        result = self.translator.translate(ast)
        return InvariantExpression.from_translation(source, ast, result, field_name)


def extract(decl: TypeDeclaration) -> AnnotatedType:
    """Extract the invariants of a type declaration."""
    return InvariantExtractor().extract(decl)
