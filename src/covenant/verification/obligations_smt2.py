"""SMT-LIBv2 emission of a validator contract's proof obligations.

This is solver-independent: it only emits SMT-LIBv2 text and does not require
the Python Z3 bindings.

Three problem shapes are produced from the same obligations:
- plain: declarations plus one `(assert ...)` per invariant (the side file),
- consistency: same as plain, SAT iff some instance satisfies every invariant,
- instance check (`bindings` + `negate`): fields pinned to runtime values and
  the conjunction of invariants negated, UNSAT iff the instance is proven.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Mapping, Optional

from ..expr.nodes import referenced_names
from ..translator.type_translator import TypeTranslator


def contract_names(contract: Any) -> List[str]:
    """All SMT symbols the contract's obligations refer to, in first-use order."""
    names: List[str] = []
    for inv in contract.invariants:
        for n in referenced_names(inv.ast):
            if n not in names:
                names.append(n)
    return names


def _conjunction(terms: List[str]) -> str:
    if not terms:
        return "true"
    if len(terms) == 1:
        return terms[0]
    return f"(and {' '.join(terms)})"


def generate_obligations_smt2(
    contract: Any,
    *,
    bindings: Optional[Mapping[str, Any]] = None,
    negate: bool = False,
    check_sat: bool = True,
    get_values: bool = False,
    type_translator: Optional[TypeTranslator] = None,
) -> str:
    tt = type_translator or TypeTranslator()
    field_types = contract.type.field_types()
    constants = contract.type.constants
    bindings = bindings or {}

    lines: list[str] = []
    lines.append(f"; Proof obligations for {contract.name}")
    lines.append("")

    names = contract_names(contract)
    declared: list[str] = []
    for name in names:
        if name in field_types:
            sort = tt.get_sort_name(field_types[name])
            if sort is None and name in bindings:
                sort = tt.get_sort_for_value(bindings[name])
            if sort is None:
                raise ValueError(
                    f"Field '{name}' of '{contract.name}' has no SMT sort "
                    f"(declared type: {field_types[name]!r})")
            lines.append(f"(declare-const {name} {sort})")
            declared.append(name)
        elif name in constants:
            value = constants[name]
            sort = tt.get_sort_for_value(value)
            if sort is None:
                raise ValueError(f"Constant '{name}' has no SMT sort: {value!r}")
            lines.append(f"(define-fun {name} () {sort} {tt.value_to_smt(value)})")
    lines.append("")

    # Pin fields to the instance's values
    for name in declared:
        if name in bindings:
            lines.append(f"(assert (= {name} {tt.value_to_smt(bindings[name])}))")

    if negate:
        logic = [inv.logic for inv in contract.invariants]
        lines.append(f"(assert (not {_conjunction(logic)}))")
    else:
        for inv, obligation in zip(contract.invariants, contract.obligations):
            lines.append(f"; {inv.source}")
            lines.append(obligation)

    if check_sat:
        lines.append("(check-sat)")
        if get_values and declared:
            lines.append(f"(get-value ({' '.join(declared)}))")

    return "\n".join(lines) + "\n"


def write_obligations_smt2(
    contract: Any,
    out_file: str | Path,
    **kwargs: Any,
) -> Path:
    out_path = Path(out_file)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(generate_obligations_smt2(contract, **kwargs))
    return out_path
