"""
Tests for environment-driven configuration.
"""
from pathlib import Path

import pytest

from covenant.config import (
    ENV_OBLIGATIONS_DIR,
    ENV_SMT_SOLVER,
    ENV_SOLVER_TIMEOUT,
    CovenantConfig,
)


def test_defaults_from_empty_environment():
    config = CovenantConfig.from_env({})
    assert config == CovenantConfig()
    assert config.solver_timeout_ms is None


def test_from_env():
    config = CovenantConfig.from_env({
        ENV_SMT_SOLVER: "cvc5",
        ENV_SOLVER_TIMEOUT: "1.5",
        ENV_OBLIGATIONS_DIR: "build/obligations",
    })

    assert config.smt_solver == "cvc5"
    assert config.solver_timeout_s == 1.5
    assert config.solver_timeout_ms == 1500
    assert config.obligations_dir == Path("build/obligations")


def test_empty_values_are_unset():
    config = CovenantConfig.from_env({ENV_SMT_SOLVER: "", ENV_SOLVER_TIMEOUT: ""})
    assert config.smt_solver is None
    assert config.solver_timeout_s is None


def test_bad_timeout():
    with pytest.raises(ValueError) as exc:
        CovenantConfig.from_env({ENV_SOLVER_TIMEOUT: "soon"})
    assert ENV_SOLVER_TIMEOUT in str(exc.value)


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv(ENV_SMT_SOLVER, "z3")
    monkeypatch.delenv(ENV_SOLVER_TIMEOUT, raising=False)
    assert CovenantConfig.from_env().smt_solver == "z3"
