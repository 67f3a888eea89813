"""
Prover integration API for types with generated validators.

Provides the surface an external prover works against: invariant source
texts, an instance content hash, and verification of an instance through a
`ProverContext`.
"""
from typing import Any, Dict, Optional, Tuple
import hashlib
import logging

from .generator import ValidatorContract
from .solver.base import ProverContext
from .solver.result import ProofError, VerificationResult, VerificationToken
from .solver.z3_solver import Z3ProverContext

logger = logging.getLogger(__name__)

CONTRACT_ATTR = "__covenant__"


def contract_for(obj: Any) -> ValidatorContract:
    """Get the validator contract of a decorated type or one of its instances.

    Raises:
        TypeError: The type was not decorated with @constitution
    """
    contract = getattr(obj, CONTRACT_ATTR, None)
    if not isinstance(contract, ValidatorContract):
        name = obj.__qualname__ if isinstance(obj, type) else type(obj).__qualname__
        raise TypeError(f"'{name}' has no generated validator (missing @constitution?)")
    return contract


def invariant_expressions(dtype: Any) -> Tuple[str, ...]:
    """Source text of each invariant declared on `dtype`."""
    return contract_for(dtype).invariant_expressions()


def compute_data_hash(instance: Any) -> bytes:
    """SHA-256 digest of the instance's `repr`.

    Dataclass reprs list every field, so equal field values give equal hashes.
    """
    return hashlib.sha256(repr(instance).encode("utf-8")).digest()


def field_bindings(instance: Any, contract: Optional[ValidatorContract] = None) -> Dict[str, Any]:
    """Current values of the contract's declared fields on `instance`."""
    contract = contract or contract_for(instance)
    return {name: getattr(instance, name) for name in contract.type.field_names
            if hasattr(instance, name)}


def verify_with_context(instance: Any,
                        context: ProverContext,
                        contract: Optional[ValidatorContract] = None) -> VerificationToken:
    """Have an external prover discharge an instance's invariants.

    Args:
        instance: Instance to verify
        context: Prover to delegate to
        contract: Validator contract (looked up on the instance's type if omitted)

    Returns:
        VerificationToken bound to the instance's content hash

    Raises:
        ProofError: The prover refuted the invariants, gave no verdict, or failed
    """
    contract = contract or contract_for(instance)
    data_hash = compute_data_hash(instance)

    try:
        result = context.check_instance(contract, field_bindings(instance, contract))
    except (ValueError, ArithmeticError, OSError, RuntimeError) as e:
        raise ProofError(f"{contract.name}: prover '{context.name}' failed: {e}") from e

    if not result.holds:
        logger.info("%s: proof failed (%s)", contract.name, result.result.value)
        raise ProofError(f"{contract.name}: invariants not proven: {result}", result)

    logger.info("%s: invariants proven by %s in %.2fms",
                contract.name, result.solver_name, result.solver_time_ms)
    return VerificationToken.issue(contract.name, data_hash, result.solver_name, contract.obligations)


def check_consistency(dtype: Any, context: Optional[ProverContext] = None) -> VerificationResult:
    """Check that some instance of `dtype` can satisfy all of its invariants.

    Returns:
        VerificationResult with holds=True and an example model if the
        invariants are jointly satisfiable, holds=False if they contradict
    """
    contract = dtype if isinstance(dtype, ValidatorContract) else contract_for(dtype)
    context = context or Z3ProverContext()
    return context.check_consistency(contract)
