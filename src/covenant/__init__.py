"""
Invariant validators and proof obligations for Python dataclasses.

Invariants declared on dataclass fields are checked at runtime by a generated
validator and translated into SMT-LIB assertions for an external prover.
"""

__version__ = "0.1.0"

from .diagnostics import (
    CovenantError,
    InvariantBuildError,
    AnnotationParseError,
    UnsupportedConstructError,
    UnresolvedFieldError,
    Diagnostic,
    GenerationError,
)
from .model import FieldDecl, TypeDeclaration, AnnotatedType, InvariantExpression
from .translator import translate, TranslationResult
from .extractor import extract
from .generator import (
    EvaluationPolicy,
    InvariantViolation,
    InvariantViolationError,
    EnforcementResult,
    ValidatorContract,
    generate,
    build_validator,
)
from .solver import (
    ProverContext,
    VerificationResult,
    VerificationToken,
    SolverResult,
    ProofError,
    Z3ProverContext,
)
from .checker import (
    invariant_expressions,
    compute_data_hash,
    verify_with_context,
    check_consistency,
)
from .constitution import constitution, field, declaration_from_dataclass
from .config import CovenantConfig

__all__ = [
    "CovenantError",
    "InvariantBuildError",
    "AnnotationParseError",
    "UnsupportedConstructError",
    "UnresolvedFieldError",
    "Diagnostic",
    "GenerationError",
    "FieldDecl",
    "TypeDeclaration",
    "AnnotatedType",
    "InvariantExpression",
    "translate",
    "TranslationResult",
    "extract",
    "EvaluationPolicy",
    "InvariantViolation",
    "InvariantViolationError",
    "EnforcementResult",
    "ValidatorContract",
    "generate",
    "build_validator",
    "ProverContext",
    "VerificationResult",
    "VerificationToken",
    "SolverResult",
    "ProofError",
    "Z3ProverContext",
    "invariant_expressions",
    "compute_data_hash",
    "verify_with_context",
    "check_consistency",
    "constitution",
    "field",
    "declaration_from_dataclass",
    "CovenantConfig",
]
