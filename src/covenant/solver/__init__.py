"""Prover abstraction layer for invariant verification."""

from .base import ProverContext
from .result import VerificationResult, VerificationToken, SolverResult, ProofError
from .z3_solver import Z3ProverContext

__all__ = [
    "ProverContext",
    "VerificationResult",
    "VerificationToken",
    "SolverResult",
    "ProofError",
    "Z3ProverContext",
]
