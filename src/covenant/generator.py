"""
Validator generation.

Turns an `AnnotatedType` into a `ValidatorContract`: a runtime check that
interprets every invariant against a live instance, plus one
`(assert <logic>)` proof obligation per invariant for an external prover.
"""
from dataclasses import dataclass, field as dc_field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple
import logging

from .diagnostics import CovenantError, DiagnosticReporter
from .expr.evaluator import EvaluationError, Evaluator
from .extractor import InvariantExtractor
from .model import AnnotatedType, InvariantExpression, TypeDeclaration

logger = logging.getLogger(__name__)


class EvaluationPolicy(Enum):
    """How `enforce` treats multiple invariants."""
    FAIL_FAST = "fail_fast"
    AGGREGATE = "aggregate"


@dataclass(frozen=True)
class InvariantViolation:
    """A false invariant observed on a live instance.

    Attributes:
        expression: Source text of the violated invariant
        field: Field the invariant was declared on (None for type-level)
        values: Field values at failure time; currently always empty
        error: Evaluation fault, if the invariant could not be evaluated
    """
    expression: str
    field: Optional[str] = None
    values: Mapping[str, Any] = dc_field(default_factory=dict, hash=False)
    error: Optional[str] = None

    def __str__(self) -> str:
        msg = f"Invariant violated: {self.expression}"
        if self.error:
            msg += f" ({self.error})"
        return msg


class InvariantViolationError(CovenantError):
    """Raised only on request, by `EnforcementResult.raise_if_violated`."""

    def __init__(self, violation: InvariantViolation):
        super().__init__(str(violation))
        self.violation = violation


@dataclass(frozen=True)
class EnforcementResult:
    """Outcome of `ValidatorContract.enforce`.

    Empty `violations` means every evaluated invariant held.
    """
    violations: Tuple[InvariantViolation, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.violations

    @property
    def violation(self) -> Optional[InvariantViolation]:
        """First violation in declaration order, if any."""
        return self.violations[0] if self.violations else None

    def __bool__(self) -> bool:
        return self.ok

    def raise_if_violated(self) -> None:
        if self.violations:
            raise InvariantViolationError(self.violations[0])


_OK = EnforcementResult()


@dataclass(frozen=True)
class ValidatorContract:
    """Generated validator and proof obligations for one type."""

    type: AnnotatedType
    obligations: Tuple[str, ...]
    evaluator: Evaluator = dc_field(compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.type.name

    @property
    def invariants(self) -> Tuple[InvariantExpression, ...]:
        return self.type.invariants

    def invariant_expressions(self) -> Tuple[str, ...]:
        """Source text of each invariant, in declaration order."""
        return tuple(inv.source for inv in self.type.invariants)

    def enforce(self, instance: Any,
                policy: EvaluationPolicy = EvaluationPolicy.FAIL_FAST) -> EnforcementResult:
        """Check all invariants against `instance`.

        With FAIL_FAST, evaluation stops at the first false invariant and only
        that one is reported. With AGGREGATE every invariant is evaluated.
        """
        violations = []
        for inv in self.type.invariants:
            violation = self._check(inv, instance)
            if violation is None:
                continue
            violations.append(violation)
            if policy is EvaluationPolicy.FAIL_FAST:
                break

        if not violations:
            return _OK
        logger.debug("%s: %d invariant violation(s), first: %s",
                     self.name, len(violations), violations[0].expression)
        return EnforcementResult(tuple(violations))

    def enforce_all(self, instance: Any) -> EnforcementResult:
        return self.enforce(instance, EvaluationPolicy.AGGREGATE)

    def render_obligations(self) -> str:
        """Render the proof obligations as an SMT-LIB comment block."""
        lines = [f"; Proof obligations for {self.name}"]
        for inv, obligation in zip(self.type.invariants, self.obligations):
            lines.append(f"; {inv.source}")
            lines.append(f";   {obligation}")
        return "\n".join(lines)

    def _check(self, inv: InvariantExpression, instance: Any) -> Optional[InvariantViolation]:
        try:
            if self.evaluator.holds(inv.ast, instance):
                return None
        except (EvaluationError, ArithmeticError, TypeError) as e:
            logger.warning("%s: could not evaluate invariant '%s': %s", self.name, inv.source, e)
            return InvariantViolation(expression=inv.source, field=inv.field, error=str(e))
        return InvariantViolation(expression=inv.source, field=inv.field)


class ValidatorGenerator:
    """Assembles validator contracts from annotated types."""

    def generate(self, annotated: AnnotatedType) -> ValidatorContract:
        """Generate the validator contract for a type.

        Args:
            annotated: Type with extracted and translated invariants

        Returns:
            ValidatorContract

        Raises:
            GenerationError: Any invariant failed to translate
        """
        reporter = DiagnosticReporter(annotated.name)
        for inv in annotated.invariants:
            if not inv.ok:
                reporter.report_translation(inv.source, inv.errors, inv.field)
        reporter.raise_if_errors()

        contract = ValidatorContract(
            type=annotated,
            obligations=tuple(inv.obligation for inv in annotated.invariants),
            evaluator=Evaluator(annotated.field_names, annotated.constants),
        )
        logger.info("Generated validator for '%s' with %d invariant(s)",
                    annotated.name, len(contract.obligations))
        return contract


def generate(annotated: AnnotatedType) -> ValidatorContract:
    """Generate the validator contract for an annotated type."""
    return ValidatorGenerator().generate(annotated)


def build_validator(decl: TypeDeclaration) -> ValidatorContract:
    """Run extraction, translation and generation for one type declaration.

    Raises:
        GenerationError: Any invariant of the type is unusable
    """
    return generate(InvariantExtractor().extract(decl))
