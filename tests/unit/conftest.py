"""
Pytest configuration and fixtures for covenant tests.
"""
import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from covenant.model import FieldDecl, TypeDeclaration


@pytest.fixture
def account_decl():
    """Declaration of an account with one field invariant and one type-level."""
    return TypeDeclaration(
        name="Account",
        fields=(
            FieldDecl("balance", int, ("self.balance >= 0",)),
            FieldDecl("limit", int, ("self.limit > 0",)),
        ),
        invariants=("self.balance <= self.limit",),
    )
