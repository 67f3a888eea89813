"""
Verification result types.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any, Tuple
import time

from ..diagnostics import CovenantError


class SolverResult(Enum):
    """Result from SMT solver check."""
    SAT = "sat"
    UNSAT = "unsat"
    UNKNOWN = "unknown"


@dataclass
class VerificationResult:
    """Result of a prover check.

    Attributes:
        holds: True if the checked property holds
        counterexample: Variable assignments reported by the solver, if any
        solver_time_ms: Time taken by solver in milliseconds
        solver_name: Name of the solver backend used
        result: Raw solver result (SAT/UNSAT/UNKNOWN)
    """
    holds: bool
    counterexample: Optional[Dict[str, Any]] = None
    solver_time_ms: float = 0.0
    solver_name: str = "unknown"
    result: SolverResult = SolverResult.UNKNOWN

    def __str__(self) -> str:
        if self.holds:
            return f"Property holds ({self.solver_name}, {self.solver_time_ms:.2f}ms)"
        else:
            cex_str = ", ".join(f"{k}={v}" for k, v in (self.counterexample or {}).items())
            return f"Property violated: {cex_str} ({self.solver_name}, {self.solver_time_ms:.2f}ms)"


@dataclass(frozen=True)
class VerificationToken:
    """Attests that an instance's invariants were discharged by a prover.

    Attributes:
        type_name: Verified type
        data_hash: Content hash of the verified instance
        solver_name: Prover that discharged the obligations
        obligations: The `(assert ...)` lines that were proven
        issued_at: Unix timestamp of issue
    """
    type_name: str
    data_hash: bytes
    solver_name: str
    obligations: Tuple[str, ...] = ()
    issued_at: float = 0.0

    @classmethod
    def issue(cls, type_name: str, data_hash: bytes, solver_name: str,
              obligations: Tuple[str, ...]) -> "VerificationToken":
        return cls(type_name, data_hash, solver_name, obligations, time.time())

    @property
    def hex_digest(self) -> str:
        return self.data_hash.hex()

    def matches(self, data_hash: bytes) -> bool:
        """True if this token was issued for content with `data_hash`."""
        return self.data_hash == data_hash


class ProofError(CovenantError):
    """The prover could not establish an instance's invariants.

    Attributes:
        result: Solver outcome, when the prover ran to completion
    """

    def __init__(self, message: str, result: Optional[VerificationResult] = None):
        super().__init__(message)
        self.result = result
