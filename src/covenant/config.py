"""
Environment-driven configuration.

    COVENANT_SMT_SOLVER       preferred external solver (name or path)
    COVENANT_SOLVER_TIMEOUT   solver timeout in seconds
    COVENANT_OBLIGATIONS_DIR  directory receiving <Type>.smt2 side files
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import os

ENV_SMT_SOLVER = "COVENANT_SMT_SOLVER"
ENV_SOLVER_TIMEOUT = "COVENANT_SOLVER_TIMEOUT"
ENV_OBLIGATIONS_DIR = "COVENANT_OBLIGATIONS_DIR"


@dataclass(frozen=True)
class CovenantConfig:
    """Settings shared by the generator host adapter and prover contexts.

    Attributes:
        smt_solver: External solver to prefer, if any
        solver_timeout_s: Timeout applied to solver runs
        obligations_dir: Where `@constitution` writes obligation side files
    """
    smt_solver: Optional[str] = None
    solver_timeout_s: Optional[float] = None
    obligations_dir: Optional[Path] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CovenantConfig":
        env = os.environ if environ is None else environ

        timeout = env.get(ENV_SOLVER_TIMEOUT) or None
        if timeout is not None:
            try:
                timeout = float(timeout)
            except ValueError as e:
                raise ValueError(f"{ENV_SOLVER_TIMEOUT} must be a number, got {timeout!r}") from e

        out_dir = env.get(ENV_OBLIGATIONS_DIR) or None
        return cls(
            smt_solver=env.get(ENV_SMT_SOLVER) or None,
            solver_timeout_s=timeout,
            obligations_dir=Path(out_dir) if out_dir else None,
        )

    @property
    def solver_timeout_ms(self) -> Optional[int]:
        if self.solver_timeout_s is None:
            return None
        return int(self.solver_timeout_s * 1000)
