"""
Z3 prover context (in-process, via the Python bindings).
"""
import logging
import time
from typing import Any, Optional, Dict, Mapping
import z3

from ..verification.obligations_smt2 import generate_obligations_smt2
from .result import VerificationResult, SolverResult

logger = logging.getLogger(__name__)


class Z3ProverContext:
    """Discharges proof obligations with the Z3 Python bindings.

    The same SMT-LIB text written to side files is loaded into the solver, so
    what is proven here is exactly what an external prover would see.
    """

    name = "z3"

    def __init__(self, timeout_ms: Optional[int] = None):
        """Initialize the context.

        Args:
            timeout_ms: Per-check solver timeout in milliseconds
        """
        self.timeout_ms = timeout_ms

    def check_instance(self, contract: Any, bindings: Mapping[str, Any]) -> VerificationResult:
        """Prove the obligations hold for concrete field values.

        UNSAT of the negated conjunction means the instance is proven.
        """
        script = generate_obligations_smt2(contract, bindings=bindings, negate=True, check_sat=False)
        result = self._run(script)

        if result == z3.unsat:
            return self._result(True, SolverResult.UNSAT)
        elif result == z3.sat:
            return self._result(False, SolverResult.SAT, self.get_model())
        return self._result(False, SolverResult.UNKNOWN)

    def check_consistency(self, contract: Any) -> VerificationResult:
        """Check that the obligations are jointly satisfiable.

        SAT means some instance satisfies every invariant; the model is
        returned as an example.
        """
        script = generate_obligations_smt2(contract, check_sat=False)
        result = self._run(script)

        if result == z3.sat:
            return self._result(True, SolverResult.SAT, self.get_model())
        elif result == z3.unsat:
            return self._result(False, SolverResult.UNSAT)
        return self._result(False, SolverResult.UNKNOWN)

    def _run(self, script: str) -> Any:
        self.solver = z3.Solver()
        if self.timeout_ms is not None:
            self.solver.set("timeout", self.timeout_ms)
        try:
            self.solver.from_string(script)
        except z3.Z3Exception as e:
            raise RuntimeError(f"z3 rejected the obligations: {e}") from e

        start_time = time.time()
        result = self.solver.check()
        self._elapsed_ms = (time.time() - start_time) * 1000
        logger.debug("z3 returned %s in %.2fms", result, self._elapsed_ms)
        return result

    def _result(self, holds: bool, result: SolverResult,
                model: Optional[Dict[str, Any]] = None) -> VerificationResult:
        return VerificationResult(
            holds=holds,
            counterexample=model,
            solver_time_ms=self._elapsed_ms,
            solver_name=self.name,
            result=result,
        )

    def get_model(self) -> Optional[Dict[str, Any]]:
        """Extract the model of the last check.

        Returns:
            Dictionary mapping constant names to Python values
        """
        model = self.solver.model()
        result = {}

        for decl in model.decls():
            name = decl.name()
            value = model[decl]

            # Convert Z3 values to Python types
            if z3.is_int_value(value):
                result[name] = value.as_long()
            elif z3.is_rational_value(value):
                result[name] = value.as_fraction()
            elif z3.is_true(value):
                result[name] = True
            elif z3.is_false(value):
                result[name] = False
            else:
                result[name] = str(value)

        return result
