"""
Translation from invariant expressions to SMT-LIB.
"""

from .expr_translator import (
    ExprToSMTTranslator,
    TranslationResult,
    translate,
    to_assertion,
)
from .type_translator import TypeTranslator

__all__ = [
    "ExprToSMTTranslator",
    "TranslationResult",
    "translate",
    "to_assertion",
    "TypeTranslator",
]
