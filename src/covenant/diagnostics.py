"""
Build-time diagnostics for invariant generation.

Errors raised while parsing, resolving or translating an invariant are
collected per type and turned into a single `GenerationError`. A type with
any such error never gets a validator.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import logging

logger = logging.getLogger(__name__)


class CovenantError(Exception):
    """Base class for all errors raised by covenant."""


class InvariantBuildError(CovenantError):
    """A build-time error tied to one invariant annotation.

    Attributes:
        message: Description of the failure
        source: Source text of the offending invariant
        offset: 0-based column into `source`, when known
    """

    kind = "build-error"

    def __init__(self, message: str, source: str = "", offset: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.source = source
        self.offset = offset


class AnnotationParseError(InvariantBuildError):
    """Annotation payload is not a syntactically valid expression."""
    kind = "parse-error"


class UnsupportedConstructError(InvariantBuildError):
    """Recognized syntax that has no translation (operator, literal, path)."""
    kind = "unsupported-construct"


class UnresolvedFieldError(InvariantBuildError):
    """`self.<x>` or a bare name that is not declared on the type."""
    kind = "unresolved-field"

    def __init__(self, name: str, source: str = "", message: Optional[str] = None):
        super().__init__(message or f"Unresolved field: '{name}'", source)
        self.name = name


@dataclass(frozen=True)
class Diagnostic:
    """One build-time failure of one invariant.

    Attributes:
        type_name: Type whose generation failed
        source: Source text of the offending invariant
        kind: Error kind ('parse-error', 'unsupported-construct', ...)
        messages: One entry per problem found in the invariant
        field: Field the invariant was declared on (None for type-level)
        offset: Column of a parse failure, when known
    """
    type_name: str
    source: str
    kind: str
    messages: Tuple[str, ...]
    field: Optional[str] = None
    offset: Optional[int] = None

    @classmethod
    def from_error(cls, type_name: str, err: InvariantBuildError,
                   field: Optional[str] = None) -> "Diagnostic":
        return cls(type_name=type_name, source=err.source, kind=err.kind,
                   messages=(err.message,), field=field, offset=err.offset)

    def render(self) -> str:
        where = f"field '{self.field}'" if self.field else "type-level invariant"
        prefix = f"  --> {where}: `"
        lines = [
            f"error[{self.kind}]: cannot generate validator for '{self.type_name}'",
            f"{prefix}{self.source}`",
        ]
        if self.offset is not None:
            lines.append(" " * (len(prefix) + self.offset) + "^")
        for msg in self.messages:
            lines.append(f"  = {msg}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()


class GenerationError(CovenantError):
    """Generation of a validator was aborted for a type."""

    def __init__(self, diagnostics: Sequence[Diagnostic]):
        self.diagnostics = tuple(diagnostics)
        super().__init__(self.render())

    @property
    def type_name(self) -> Optional[str]:
        return self.diagnostics[0].type_name if self.diagnostics else None

    def render(self) -> str:
        body = "\n\n".join(d.render() for d in self.diagnostics)
        n = len(self.diagnostics)
        return f"{body}\n\n{n} invariant error{'s' if n != 1 else ''}"


@dataclass
class DiagnosticReporter:
    """Collects diagnostics for one type and halts generation on any error."""

    type_name: str
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def report(self, diagnostic: Diagnostic) -> None:
        logger.debug("%s", diagnostic.render())
        self.diagnostics.append(diagnostic)

    def report_error(self, err: InvariantBuildError, field: Optional[str] = None) -> None:
        self.report(Diagnostic.from_error(self.type_name, err, field))

    def report_translation(self, source: str, errors: Sequence[str],
                           field: Optional[str] = None) -> None:
        self.report(Diagnostic(
            type_name=self.type_name,
            source=source,
            kind=UnsupportedConstructError.kind,
            messages=tuple(errors),
            field=field,
        ))

    @property
    def has_errors(self) -> bool:
        return bool(self.diagnostics)

    def raise_if_errors(self) -> None:
        if self.diagnostics:
            logger.info("Generation for '%s' halted with %d diagnostic(s)",
                        self.type_name, len(self.diagnostics))
            raise GenerationError(self.diagnostics)
