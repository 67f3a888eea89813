"""SMT-LIB based verification (solver-independent).

This package emits SMT-LIBv2 obligation files and runs external solvers
(z3/cvc5/yices) as subprocesses.
"""

from .solver_runner import (
    SolverSpec,
    SolverRunResult,
    resolve_solver,
    run_solver,
    is_solver_available,
    pick_solver,
)
from .obligations_smt2 import generate_obligations_smt2, write_obligations_smt2
from .verifier import SolverProcessContext, parse_get_value_output

__all__ = [
    "SolverSpec",
    "SolverRunResult",
    "resolve_solver",
    "run_solver",
    "is_solver_available",
    "pick_solver",
    "generate_obligations_smt2",
    "write_obligations_smt2",
    "SolverProcessContext",
    "parse_get_value_output",
]
