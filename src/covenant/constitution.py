"""
Dataclass front end for invariant generation.

Invariants are attached to dataclass fields with `covenant.field` and to the
type itself through `@constitution(invariants=...)` or an `__invariants__`
class attribute:

    >>> @constitution
    ... @dataclasses.dataclass
    ... class Account:
    ...     balance: int = field(invariant="self.balance >= 0")
    ...     limit: int = field(default=100, invariants=["self.limit > 0"])
    >>> Account(balance=-5).enforce().violation.expression
    'self.balance >= 0'

The validator is generated when the class is decorated. A type with any
unusable invariant raises `GenerationError` at that point.
"""
import dataclasses
import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from .checker import CONTRACT_ATTR, compute_data_hash, contract_for, verify_with_context
from .config import CovenantConfig
from .generator import EnforcementResult, EvaluationPolicy, build_validator
from .model import FieldDecl, TypeDeclaration
from .verification.obligations_smt2 import write_obligations_smt2

logger = logging.getLogger(__name__)

INVARIANTS_KEY = "covenant.invariants"


def _as_payloads(invariants: Union[str, Iterable[str]]) -> List[str]:
    # A lone string is one invariant, not a sequence of characters
    if isinstance(invariants, str):
        return [invariants]
    return list(invariants)


def field(*, invariant: Optional[str] = None, invariants: Iterable[str] = (),
          metadata: Optional[Mapping[str, Any]] = None, **kwargs) -> Any:
    """Declare a dataclass field carrying invariant annotations.

    Args:
        invariant: Single invariant expression
        invariants: Further invariant expressions, evaluated after `invariant`
        metadata: Extra dataclass field metadata
        **kwargs: Passed through to `dataclasses.field`
    """
    payloads = [] if invariant is None else [invariant]
    payloads.extend(_as_payloads(invariants))

    md = dict(metadata or {})
    md[INVARIANTS_KEY] = tuple(payloads)
    return dataclasses.field(metadata=md, **kwargs)


def declaration_from_dataclass(cls: type,
                               invariants: Iterable[str] = (),
                               constants: Optional[Mapping[str, Any]] = None) -> TypeDeclaration:
    """Build a TypeDeclaration from a dataclass.

    Type-level invariants come from `__invariants__` followed by `invariants`.
    """
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"Expected a dataclass, got {cls!r}")

    fields = tuple(
        FieldDecl(name=f.name, type=f.type, invariants=tuple(f.metadata.get(INVARIANTS_KEY, ())))
        for f in dataclasses.fields(cls))

    type_level = _as_payloads(getattr(cls, "__invariants__", ()))
    type_level.extend(_as_payloads(invariants))

    return TypeDeclaration(
        name=cls.__qualname__,
        fields=fields,
        invariants=tuple(type_level),
        constants=dict(constants or {}),
    )


def _enforce(self, policy: EvaluationPolicy = EvaluationPolicy.FAIL_FAST) -> EnforcementResult:
    """Check this instance against every declared invariant."""
    return contract_for(self).enforce(self, policy)


def _invariant_expressions(cls) -> tuple:
    """Source text of each declared invariant."""
    return contract_for(cls).invariant_expressions()


def _compute_data_hash(self) -> bytes:
    return compute_data_hash(self)


def _verify_with_context(self, context):
    return verify_with_context(self, context)


_METHODS = {
    "enforce": _enforce,
    "invariant_expressions": classmethod(_invariant_expressions),
    "compute_data_hash": _compute_data_hash,
    "verify_with_context": _verify_with_context,
}


def _process_class(cls: type, invariants: Iterable[str], constants: Optional[Mapping[str, Any]],
                   config: Optional[CovenantConfig]) -> type:
    decl = declaration_from_dataclass(cls, invariants, constants)
    contract = build_validator(decl)
    setattr(cls, CONTRACT_ATTR, contract)

    # Methods defined by the class itself win
    for name, method in _METHODS.items():
        if name not in cls.__dict__:
            setattr(cls, name, method)

    config = config or CovenantConfig.from_env()
    if config.obligations_dir is not None:
        path = write_obligations_smt2(contract, config.obligations_dir / f"{decl.name}.smt2")
        logger.info("Wrote proof obligations for '%s' to %s", decl.name, path)

    return cls


def constitution(cls: Optional[type] = None, *,
                 invariants: Iterable[str] = (),
                 constants: Optional[Mapping[str, Any]] = None,
                 config: Optional[CovenantConfig] = None) -> Union[type, Callable[[type], type]]:
    """Generate a validator for a dataclass.

    Installs `enforce()`, `invariant_expressions()`, `compute_data_hash()` and
    `verify_with_context()` on the class and stores the `ValidatorContract`
    as `__covenant__`.

    Args:
        cls: Dataclass to process (when used without arguments)
        invariants: Type-level invariants
        constants: Values bare identifiers in invariants may refer to
        config: Configuration (read from the environment when omitted)

    Raises:
        GenerationError: Any invariant is malformed, unresolved or unsupported
    """
    def wrap(cls: type) -> type:
        return _process_class(cls, invariants, constants, config)

    if cls is None:
        return wrap
    return wrap(cls)
