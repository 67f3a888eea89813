"""
Tests for validator generation and runtime enforcement.
"""
from dataclasses import dataclass

import pytest

from covenant.diagnostics import GenerationError
from covenant.extractor import extract
from covenant.generator import (
    EnforcementResult,
    EvaluationPolicy,
    InvariantViolation,
    InvariantViolationError,
    ValidatorGenerator,
    build_validator,
    generate,
)
from covenant.model import FieldDecl, TypeDeclaration


@dataclass
class Account:
    balance: int
    limit: int


@dataclass
class Pair:
    a: int
    b: int


@pytest.fixture
def account_contract(account_decl):
    return build_validator(account_decl)


def test_obligations(account_contract):
    assert account_contract.obligations == (
        "(assert (>= balance 0))",
        "(assert (> limit 0))",
        "(assert (<= balance limit))",
    )


def test_invariant_expressions(account_contract):
    assert account_contract.invariant_expressions() == (
        "self.balance >= 0",
        "self.limit > 0",
        "self.balance <= self.limit",
    )


def test_enforce_valid_instance(account_contract):
    result = account_contract.enforce(Account(balance=10, limit=100))

    assert result.ok
    assert bool(result) is True
    assert result.violation is None
    result.raise_if_violated()


def test_enforce_negative_balance(account_contract):
    """balance = -5 violates self.balance >= 0."""
    result = account_contract.enforce(Account(balance=-5, limit=100))

    assert not result.ok
    assert result.violation.expression == "self.balance >= 0"
    assert result.violation.field == "balance"


def test_zero_invariants_always_succeed():
    contract = build_validator(TypeDeclaration("Free", (FieldDecl("x", int),)))

    assert contract.obligations == ()
    assert contract.enforce(object()).ok
    assert contract.enforce(Account(balance=-1, limit=-1)).ok


def test_fail_fast_reports_first_violation_only(account_contract):
    """An instance violating I1 and I2 reports I1 only."""
    result = account_contract.enforce(Account(balance=-5, limit=-1))

    assert len(result.violations) == 1
    assert result.violation.expression == "self.balance >= 0"


def test_fail_fast_skips_later_invariants():
    """Later invariants are not evaluated once one fails."""
    decl = TypeDeclaration(
        "Div",
        (FieldDecl("n", int, ("self.n != 0",)),
         FieldDecl("d", int, ("100 / self.n > 1",))),
    )
    contract = build_validator(decl)

    class Instance:
        n = 0
        d = 0

    result = contract.enforce(Instance())
    assert result.violation.expression == "self.n != 0"
    assert result.violation.error is None


def test_aggregate_reports_all_violations(account_contract):
    result = account_contract.enforce(Account(balance=-5, limit=-1), EvaluationPolicy.AGGREGATE)

    assert [v.expression for v in result.violations] == [
        "self.balance >= 0",
        "self.limit > 0",
    ]
    assert result.violation.expression == "self.balance >= 0"
    assert account_contract.enforce_all(Account(balance=-5, limit=-1)) == result


def test_violation_values_may_be_empty(account_contract):
    violation = account_contract.enforce(Account(balance=-5, limit=1)).violation
    assert dict(violation.values) == {}


def test_raise_if_violated(account_contract):
    result = account_contract.enforce(Account(balance=-5, limit=100))

    with pytest.raises(InvariantViolationError) as exc:
        result.raise_if_violated()

    assert exc.value.violation.expression == "self.balance >= 0"
    assert "self.balance >= 0" in str(exc.value)


def test_evaluation_fault_is_a_violation():
    """Division by zero is reported, not raised."""
    contract = build_validator(
        TypeDeclaration("Ratio", (FieldDecl("a", int), FieldDecl("b", int, ("self.a / self.b > 1",)))))

    result = contract.enforce(Pair(a=1, b=0))
    assert not result.ok
    assert result.violation.expression == "self.a / self.b > 1"
    assert "division" in result.violation.error


def test_missing_field_is_a_violation(account_contract):
    result = account_contract.enforce(object())
    assert result.violation.expression == "self.balance >= 0"
    assert "balance" in result.violation.error


def test_short_circuit_guard():
    contract = build_validator(TypeDeclaration(
        "Guarded",
        (FieldDecl("a", int), FieldDecl("b", int)),
        invariants=("self.b == 0 or self.a / self.b >= 1",)))

    assert contract.enforce(Pair(a=1, b=0)).ok
    assert contract.enforce(Pair(a=4, b=2)).ok
    assert not contract.enforce(Pair(a=1, b=2)).ok


def test_constants_and_bare_field_names():
    contract = build_validator(TypeDeclaration(
        "Capped",
        (FieldDecl("a", int, ("a <= CAP",)), FieldDecl("b", int)),
        constants={"CAP": 10}))

    assert contract.obligations == ("(assert (<= a CAP))",)
    assert contract.enforce(Pair(a=10, b=0)).ok
    assert not contract.enforce(Pair(a=11, b=0)).ok


@pytest.mark.parametrize("source,a,b,holds", [
    ("self.a % 3 == self.b", 7, 1, True),
    ("-self.a < self.b", 5, -4, True),
    ("not self.a > self.b", 3, 2, False),
    ("self.a * self.b - 1 >= 0", 0, 9, False),
    ("0 <= self.a < self.b", 1, 2, True),
])
def test_interpreted_operators(source, a, b, holds):
    contract = build_validator(TypeDeclaration("P", (FieldDecl("a", int), FieldDecl("b", int)),
                                               invariants=(source,)))
    assert contract.enforce(Pair(a=a, b=b)).ok is holds


def test_translation_error_halts_generation():
    """An unsupported operator stops generation with a diagnostic."""
    decl = TypeDeclaration(
        "Bits",
        (FieldDecl("a", int, ("self.a >= 0",)), FieldDecl("b", int, ("self.a ^ self.b == 0",))))
    annotated = extract(decl)

    with pytest.raises(GenerationError) as exc:
        ValidatorGenerator().generate(annotated)

    assert len(exc.value.diagnostics) == 1
    diag = exc.value.diagnostics[0]
    assert diag.type_name == "Bits"
    assert diag.source == "self.a ^ self.b == 0"
    assert diag.kind == "unsupported-construct"
    assert "^" in diag.messages[0]


def test_generate_function(account_decl):
    contract = generate(extract(account_decl))
    assert contract.name == "Account"
    assert len(contract.invariants) == 3


def test_render_obligations(account_contract):
    text = account_contract.render_obligations()
    assert text.splitlines()[0] == "; Proof obligations for Account"
    assert ";   (assert (>= balance 0))" in text
    assert "; self.balance <= self.limit" in text


def test_enforcement_result_defaults():
    assert EnforcementResult().ok
    v = InvariantViolation("self.x > 0")
    assert str(v) == "Invariant violated: self.x > 0"
    assert EnforcementResult((v,)).violation is v
