"""Run external SMT solvers over obligation files.

A solver receives the SMT2 file as its last argument and prints its verdict
(sat/unsat/unknown) first, optionally followed by `(get-value ...)` output.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
import logging
import os
import shutil
import subprocess
import time

from ..config import CovenantConfig
from ..solver.result import SolverResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverSpec:
    """Command line of an external SMT solver."""

    name: str
    argv: Tuple[str, ...]

    def command(self, smt2_path: Path) -> List[str]:
        return [*self.argv, str(smt2_path)]

    def is_available(self) -> bool:
        """True if the executable exists (explicit path) or is on PATH."""
        exe = self.argv[0]
        if Path(exe).parent != Path("."):
            return os.access(exe, os.X_OK)
        return shutil.which(exe) is not None


@dataclass(frozen=True)
class SolverRunResult:
    result: SolverResult
    stdout: str
    stderr: str
    returncode: int
    time_ms: float
    timed_out: bool = False


# Model production is needed for (get-value ...) after sat
_KNOWN_SOLVERS = {
    "z3": SolverSpec("z3", ("z3", "-smt2")),
    "cvc5": SolverSpec("cvc5", ("cvc5", "--lang", "smt2", "--produce-models")),
    "yices": SolverSpec("yices", ("yices-smt2",)),
}

_VERDICTS = {v.value: v for v in SolverResult}


def resolve_solver(name_or_path: str) -> SolverSpec:
    """Map a known solver name, or any executable path, to a SolverSpec."""
    known = _KNOWN_SOLVERS.get(name_or_path)
    if known is not None:
        return known
    return SolverSpec(Path(name_or_path).name or name_or_path, (name_or_path,))


def is_solver_available(name_or_path: str) -> bool:
    return resolve_solver(name_or_path).is_available()


def pick_solver(preferred: Sequence[str] = ("z3", "cvc5", "yices"),
                config: Optional[CovenantConfig] = None) -> Optional[SolverSpec]:
    """Pick the first available solver.

    A solver configured through $COVENANT_SMT_SOLVER takes precedence over
    `preferred`.
    """
    config = config or CovenantConfig.from_env()
    candidates = [config.smt_solver] if config.smt_solver else []
    candidates.extend(preferred)

    for name in candidates:
        spec = resolve_solver(name)
        if spec.is_available():
            return spec
    return None


def parse_verdict(stdout: str) -> SolverResult:
    """Verdict from the first non-comment output line; anything else is UNKNOWN."""
    for line in stdout.splitlines():
        s = line.strip()
        if s and not s.startswith(";"):
            return _VERDICTS.get(s, SolverResult.UNKNOWN)
    return SolverResult.UNKNOWN


def run_solver(solver: SolverSpec, smt2_file: str | Path, *,
               timeout_s: Optional[float] = None) -> SolverRunResult:
    """Run `solver` on an SMT2 file.

    A timeout is reported as an UNKNOWN result rather than raised.
    """
    argv = solver.command(Path(smt2_file))
    logger.debug("Running %s", " ".join(argv))

    t0 = time.time()
    try:
        p = subprocess.run(argv, capture_output=True, text=True, timeout=timeout_s)
    except subprocess.TimeoutExpired as e:
        dt_ms = (time.time() - t0) * 1000.0
        logger.info("%s timed out after %.0fms", solver.name, dt_ms)
        return SolverRunResult(
            result=SolverResult.UNKNOWN,
            stdout=e.stdout if isinstance(e.stdout, str) else "",
            stderr=e.stderr if isinstance(e.stderr, str) else "",
            returncode=-1,
            time_ms=dt_ms,
            timed_out=True,
        )

    return SolverRunResult(
        result=parse_verdict(p.stdout),
        stdout=p.stdout,
        stderr=p.stderr,
        returncode=p.returncode,
        time_ms=(time.time() - t0) * 1000.0,
    )
