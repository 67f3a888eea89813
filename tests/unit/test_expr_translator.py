"""
Tests for invariant expression to SMT-LIB translation.
"""
import pytest

from covenant.expr import BinaryOp, UnaryOp, FieldAccess, Identifier, Literal, parse_invariant
from covenant.translator import ExprToSMTTranslator, TranslationResult, translate, to_assertion


def self_field(name):
    return FieldAccess(Identifier("self"), name)


@pytest.fixture
def translator():
    """Create an ExprToSMTTranslator instance."""
    return ExprToSMTTranslator()


@pytest.mark.parametrize("op,symbol", [
    ("==", "="),
    ("!=", "distinct"),
    ("<", "<"),
    ("<=", "<="),
    (">", ">"),
    (">=", ">="),
    ("+", "+"),
    ("-", "-"),
    ("*", "*"),
    ("/", "/"),
    ("%", "mod"),
    ("and", "and"),
    ("or", "or"),
])
def test_binary_operator_mapping(translator, op, symbol):
    """Each supported binary operator maps to (S a b)."""
    node = BinaryOp(op, self_field("a"), Identifier("b"))
    result = translator.translate(node)

    assert result.ok
    assert result.errors == ()
    assert result.output == f"({symbol} a b)"


def test_binary_operands_are_translated(translator):
    """Operands are translated recursively, not copied."""
    node = BinaryOp("==", BinaryOp("%", self_field("x"), Literal(2)), Literal(0))
    assert translator.translate(node).output == "(= (mod x 2) 0)"


def test_unary_not_and_negation(translator):
    assert translator.translate(UnaryOp("not", self_field("flag"))).output == "(not flag)"
    assert translator.translate(UnaryOp("-", self_field("delta"))).output == "(- delta)"


def test_self_field_translates_to_bare_identifier(translator):
    assert translator.translate(self_field("balance")).output == "balance"


def test_bare_identifier_unchanged(translator):
    assert translator.translate(Identifier("MAX_LIMIT")).output == "MAX_LIMIT"


def test_literals(translator):
    """Integer and boolean literals translate to their textual form."""
    assert translator.translate(Literal(42)).output == "42"
    assert translator.translate(Literal(True)).output == "true"
    assert translator.translate(Literal(False)).output == "false"
    # SMT-LIB numerals are non-negative
    assert translator.translate(Literal(-3)).output == "(- 3)"


def test_balance_non_negative():
    """self.balance >= 0 -> (>= balance 0)."""
    result = translate(parse_invariant("self.balance >= 0"))
    assert result.output == "(>= balance 0)"
    assert to_assertion(result.output) == "(assert (>= balance 0))"


def test_sum_greater_than():
    """self.a + self.b > self.c -> (> (+ a b) c)."""
    result = translate(parse_invariant("self.a + self.b > self.c"))
    assert result.output == "(> (+ a b) c)"


def test_nesting_preserved_through_parentheses():
    """(a + b) > c keeps one parenthesis pair per operator node."""
    result = translate(parse_invariant("(self.a + self.b) > self.c"))
    assert result.output == "(> (+ a b) c)"
    assert result.output.count("(") == 2

    result = translate(parse_invariant("self.a * (self.b - self.c) <= 10"))
    assert result.output == "(<= (* a (- b c)) 10)"
    assert result.output.count("(") == 3


def test_boolean_connectives():
    result = translate(parse_invariant("not self.frozen or self.balance == 0"))
    assert result.output == "(or (not frozen) (= balance 0))"

    result = translate(parse_invariant("self.a > 0 and self.b > 0 and self.c > 0"))
    assert result.output == "(and (and (> a 0) (> b 0)) (> c 0))"


def test_unsupported_binary_operator(translator):
    """Bitwise xor is rejected with an error and no output."""
    result = translator.translate(BinaryOp("^", self_field("a"), self_field("b")))

    assert not result.ok
    assert result.output == ""
    assert len(result.errors) == 1
    assert "^" in result.errors[0]


@pytest.mark.parametrize("source", [
    "self.a | self.b",
    "self.a & 1 == 0",
    "self.a << 2 > 0",
    "self.a // 2 > 0",
    "self.a ** 2 > 0",
])
def test_unsupported_operators_from_source(source):
    result = translate(parse_invariant(source))
    assert result.errors
    assert result.output == ""


def test_unsupported_unary_operator(translator):
    result = translator.translate(UnaryOp("~", self_field("mask")))
    assert result.output == ""
    assert result.errors == ("Unsupported unary operator: ~",)


def test_multi_level_field_path_rejected(translator):
    node = FieldAccess(self_field("owner"), "id")
    result = translator.translate(node)

    assert result.output == ""
    assert "self.owner.id" in result.errors[0]


def test_non_self_field_path_rejected(translator):
    result = translator.translate(FieldAccess(Identifier("other"), "balance"))
    assert result.output == ""
    assert result.errors


@pytest.mark.parametrize("value", [1.5, "abc", None, b"x"])
def test_unsupported_literal_kinds(translator, value):
    result = translator.translate(Literal(value))
    assert result.output == ""
    assert "Unsupported literal" in result.errors[0]


def test_unknown_node_type(translator):
    result = translator.translate(object())
    assert result.output == ""
    assert result.errors == ("Unsupported expression type: object",)


def test_child_error_aborts_parent(translator):
    """A failed child never leaves a blank placeholder in the parent."""
    bad = BinaryOp("^", self_field("a"), Literal(1))
    node = BinaryOp(">=", bad, Literal(0))
    result = translator.translate(node)

    assert result.output == ""
    assert result.errors == ("Unsupported binary operator: ^",)


def test_error_propagates_to_every_ancestor(translator):
    node = UnaryOp("not", BinaryOp("and",
                                   BinaryOp(">", self_field("a"), Literal(0)),
                                   BinaryOp("==", Literal(1.0), self_field("b"))))
    result = translator.translate(node)

    assert result.output == ""
    assert len(result.errors) == 1
    assert "1.0" in result.errors[0]


def test_errors_accumulate_from_both_sides(translator):
    node = BinaryOp("+",
                    BinaryOp("^", self_field("a"), Literal(1)),
                    FieldAccess(Identifier("other"), "b"))
    result = translator.translate(node)

    assert result.output == ""
    assert len(result.errors) == 2


def test_sibling_result_not_corrupted(translator):
    """Translating a failing subtree does not affect a later translation."""
    assert not translator.translate(BinaryOp("^", Literal(1), Literal(2))).ok
    assert translator.translate(BinaryOp("+", Literal(1), Literal(2))).output == "(+ 1 2)"


def test_translation_is_deterministic(translator):
    node = parse_invariant("self.a + self.b > self.c and not self.d")
    assert translator.translate(node) == translator.translate(node)


def test_translation_result_factories():
    assert TranslationResult.success("x") == TranslationResult("x", ())
    failed = TranslationResult.failure(["e1", "e2"])
    assert failed.output == ""
    assert failed.errors == ("e1", "e2")
    assert not failed.ok
