"""
Type translator from Python field types to SMT sorts.
"""
from fractions import Fraction
import math
from typing import Any, Optional


class TypeTranslator:
    """Translates declared field types and runtime values to SMT sorts and terms.

    Mapping:
        bool  -> Bool
        int   -> Int
        float -> Real
    """

    _SORTS = {
        bool: "Bool",
        int: "Int",
        float: "Real",
    }

    _SORT_NAMES = {
        "bool": "Bool",
        "int": "Int",
        "float": "Real",
    }

    def get_sort_name(self, py_type: Any) -> Optional[str]:
        """Get the SMT-LIB sort for a declared type.

        Args:
            py_type: Declared type (class or string annotation)

        Returns:
            Sort name, or None if the type has no SMT counterpart
        """
        if isinstance(py_type, str):
            return self._SORT_NAMES.get(py_type.strip())
        return self._SORTS.get(py_type)

    def get_sort_for_value(self, value: Any) -> Optional[str]:
        """Infer a sort from a runtime value (bool is checked before int)."""
        for py_type in (bool, int, float):
            if isinstance(value, py_type):
                return self._SORTS[py_type]
        return None

    def value_to_smt(self, value: Any) -> str:
        """Render a Python value as an SMT-LIB term."""
        if isinstance(value, bool):
            return "true" if value else "false"
        elif isinstance(value, int):
            return f"(- {-value})" if value < 0 else str(value)
        elif isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError(f"Non-finite real has no SMT term: {value!r}")
            frac = Fraction(value)
            num = abs(frac.numerator)
            term = f"{num}.0" if frac.denominator == 1 else f"(/ {num}.0 {frac.denominator}.0)"
            return f"(- {term})" if frac < 0 else term
        raise ValueError(f"Cannot render value as SMT term: {value!r}")
