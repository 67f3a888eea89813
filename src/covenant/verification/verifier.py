"""Prover context backed by an external SMT solver process.

The contract's obligations are emitted as SMT-LIBv2 into a temporary file and
handed to a solver binary (z3/cvc5/yices) as a subprocess.

Note: this does *not* use Python Z3 bindings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import logging
import re
import tempfile

from ..config import CovenantConfig
from ..solver.result import SolverResult, VerificationResult

from .obligations_smt2 import write_obligations_smt2
from .solver_runner import SolverRunResult, SolverSpec, pick_solver, resolve_solver, run_solver

logger = logging.getLogger(__name__)


_VALUE_PAIR = re.compile(
    r"\(\s*(?P<term>[A-Za-z_][^\s()]*)\s+(?P<val>\(\s*-\s*[0-9.]+\s*\)|[^\s()]+)\s*\)")


def parse_get_value_output(stdout: str) -> Dict[str, Any]:
    """Best-effort parse of SMT-LIB `(get-value ...)` output.

    Handles the common shape `((x 1) (flag true) (y (- 3)))`. Values are
    returned as strings unless they look like booleans or integer numerals.
    """
    out: Dict[str, Any] = {}

    for m in _VALUE_PAIR.finditer(stdout):
        term = m.group("term")
        val_s = m.group("val").strip()

        if val_s == "true":
            val: Any = True
        elif val_s == "false":
            val = False
        elif re.fullmatch(r"\d+", val_s):
            val = int(val_s)
        elif re.fullmatch(r"\(\s*-\s*\d+\s*\)", val_s):
            val = -int(val_s.strip("()- \t"))
        else:
            val = val_s

        out[term] = val

    return out


class SolverProcessContext:
    """Discharges proof obligations with an external solver binary."""

    def __init__(self, solver: Optional[str] = None, *,
                 timeout_s: Optional[float] = None,
                 config: Optional[CovenantConfig] = None):
        """Initialize the context.

        Args:
            solver: Solver name or path; picked from PATH when omitted
            timeout_s: Solver timeout; defaults to the configured one
            config: Configuration (read from the environment when omitted)

        Raises:
            RuntimeError: No solver given and none found on this system
        """
        config = config or CovenantConfig.from_env()
        if solver is not None:
            self.spec: SolverSpec = resolve_solver(solver)
        else:
            picked = pick_solver(config=config)
            if picked is None:
                raise RuntimeError(
                    "No external SMT solver found (set $COVENANT_SMT_SOLVER)")
            self.spec = picked
        self.timeout_s = timeout_s if timeout_s is not None else config.solver_timeout_s

    @property
    def name(self) -> str:
        return self.spec.name

    def check_instance(self, contract: Any, bindings: Mapping[str, Any]) -> VerificationResult:
        """Prove the obligations for concrete values (UNSAT of the negation)."""
        rr = self._run(contract, "instance", bindings=bindings, negate=True, get_values=True)

        holds = rr.result == SolverResult.UNSAT
        cex = parse_get_value_output(rr.stdout) if rr.result == SolverResult.SAT else None
        return self._to_result(holds, rr, cex)

    def check_consistency(self, contract: Any) -> VerificationResult:
        """SAT means some instance satisfies all obligations."""
        rr = self._run(contract, "consistency", get_values=True)

        holds = rr.result == SolverResult.SAT
        example = parse_get_value_output(rr.stdout) if holds else None
        return self._to_result(holds, rr, example)

    def _run(self, contract: Any, kind: str, **kwargs: Any) -> SolverRunResult:
        with tempfile.TemporaryDirectory(prefix="covenant-") as td:
            smt2_path = Path(td) / f"{contract.name}_{kind}.smt2"
            write_obligations_smt2(contract, smt2_path, **kwargs)
            rr = run_solver(self.spec, smt2_path, timeout_s=self.timeout_s)

        if rr.result == SolverResult.UNKNOWN and rr.stderr:
            logger.info("%s gave no verdict for %s: %s", self.name, contract.name, rr.stderr.strip())
        return rr

    def _to_result(self, holds: bool, rr: SolverRunResult,
                   model: Optional[Dict[str, Any]]) -> VerificationResult:
        return VerificationResult(
            holds=holds,
            counterexample=model,
            solver_time_ms=rr.time_ms,
            solver_name=self.name,
            result=rr.result,
        )
