"""
Abstract interface for prover contexts.
"""
from typing import Protocol, Any, Mapping

from .result import VerificationResult


class ProverContext(Protocol):
    """Protocol for the external prover consumed by `verify_with_context`.

    This allows pluggable provers (in-process Z3, solver subprocesses, ...)
    behind one interface.
    """

    name: str

    def check_instance(self, contract: Any, bindings: Mapping[str, Any]) -> VerificationResult:
        """Prove the contract's obligations for concrete field values.

        Args:
            contract: ValidatorContract whose obligations are checked
            bindings: Field name -> runtime value of the instance

        Returns:
            VerificationResult with holds=True if every obligation is entailed
        """
        ...

    def check_consistency(self, contract: Any) -> VerificationResult:
        """Check that some instance can satisfy all obligations at once.

        Returns:
            VerificationResult with holds=True and an example model when the
            obligations are satisfiable
        """
        ...
