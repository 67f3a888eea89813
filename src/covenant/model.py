"""
Data model for invariant generation.

`TypeDeclaration` is the input handed to the extractor; `AnnotatedType` and
`InvariantExpression` are what the extractor produces. All records are
immutable once built.
"""
from dataclasses import dataclass, field as dc_field
from typing import Any, Dict, Mapping, Optional, Tuple

from .expr.nodes import ExpressionNode
from .translator.expr_translator import TranslationResult, to_assertion


@dataclass(frozen=True)
class FieldDecl:
    """A declared field and the invariant payloads attached to it."""
    name: str
    type: Any = None
    invariants: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class TypeDeclaration:
    """A type declaration as seen by the extractor.

    Attributes:
        name: Type name used in diagnostics and generated artifacts
        fields: Declared fields, in declaration order
        invariants: Type-level invariant payloads
        constants: Values that bare identifiers in invariants may refer to
    """
    name: str
    fields: Tuple[FieldDecl, ...] = ()
    invariants: Tuple[Any, ...] = ()
    constants: Mapping[str, Any] = dc_field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class InvariantExpression:
    """One invariant: its source, parsed tree and translation outcome.

    Exactly one of `logic` and a non-empty `errors` is present.
    """
    source: str
    ast: ExpressionNode
    logic: Optional[str] = None
    errors: Tuple[str, ...] = ()
    field: Optional[str] = None

    def __post_init__(self):
        if (self.logic is None) == (not self.errors):
            raise ValueError(
                f"Invariant '{self.source}' must carry either a translation or errors, not "
                + ("both" if self.errors else "neither"))

    @classmethod
    def from_translation(cls, source: str, ast: ExpressionNode, result: TranslationResult,
                         field: Optional[str] = None) -> "InvariantExpression":
        if result.ok:
            return cls(source=source, ast=ast, logic=result.output, field=field)
        return cls(source=source, ast=ast, errors=result.errors, field=field)

    @property
    def ok(self) -> bool:
        return self.logic is not None

    @property
    def obligation(self) -> Optional[str]:
        """The `(assert ...)` line for this invariant, if it translated."""
        return to_assertion(self.logic) if self.logic is not None else None


@dataclass(frozen=True)
class AnnotatedType:
    """A type with its fields and extracted invariants.

    Attributes:
        name: Type name
        fields: (name, declared type) pairs, in declaration order
        invariants: Field-level invariants in field order, then type-level ones
        constants: Values available to bare identifiers
    """
    name: str
    fields: Tuple[Tuple[str, Any], ...] = ()
    invariants: Tuple[InvariantExpression, ...] = ()
    constants: Mapping[str, Any] = dc_field(default_factory=dict, hash=False)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.fields)

    def field_types(self) -> Dict[str, Any]:
        return dict(self.fields)
