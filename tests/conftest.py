import sys
import os

import pytest

# backend/ modules are imported bare (from gpa import ...)
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

# scripts/ for the CLI tests
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "scripts"))


@pytest.fixture
def cse_policy():
    from requirements import get_policy
    return get_policy("CSE")
