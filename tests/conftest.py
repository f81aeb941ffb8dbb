"""
Pytest Configuration and Fixtures
=================================

Provides shared fixtures for the test suite:
- Recipe factory for role-labelled recipes
- Deterministic randomness source for exact-pick assertions
- Isolated configuration (no config.yaml / environment leakage)

SAFETY: Logs are redirected to a temporary directory (PLANNER_LOG_DIR) before
any planner module is imported, so nothing is written under the project root.
"""

import io
import os
import random
import tempfile

import pytest
from rich.console import Console

from meal_roles import PlanRecipe, Role


ROLE_CODES = {"p": Role.PROTEIN, "s": Role.STARCH, "v": Role.VEGETABLE}


class FirstChoiceRandom(random.Random):
    """
    Deterministic stand-in for the tie-break source.

    choice() takes the first element and random() is constant, so ties resolve
    to pool order and tests can assert exact picks.
    """

    def choice(self, seq):
        return seq[0]

    def random(self):
        return 0.0


def make_recipe(recipe_id: str, roles: str = "", name: str = None, categories=()) -> PlanRecipe:
    """Build a recipe from role codes, e.g. make_recipe("X", "ps", categories=["dinner"])."""
    return PlanRecipe(
        id=recipe_id,
        name=name or recipe_id,
        roles=frozenset(ROLE_CODES[c] for c in roles),
        categories=frozenset(categories),
    )


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def recipe():
    """Recipe factory."""
    return make_recipe


@pytest.fixture
def first_choice_rng():
    return FirstChoiceRandom()


@pytest.fixture
def isolated_config(monkeypatch):
    """Empty USER_CONFIG and no planner environment variables."""
    import config

    monkeypatch.setattr(config, "USER_CONFIG", {})
    for var in ("START_DATE", "DAYS", "NO_REPEAT_DAYS", "MIN_ROLES_COVERED"):
        monkeypatch.delenv(var, raising=False)
    return config


@pytest.fixture
def quiet_ui():
    """PlannerUI writing into a buffer instead of the terminal."""
    from tools.progress_ui import PlannerUI

    buffer = io.StringIO()
    ui = PlannerUI(Console(file=buffer, width=120))
    ui.buffer = buffer
    return ui


# =============================================================================
# Test Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    os.environ["PLANNER_LOG_DIR"] = tempfile.mkdtemp(prefix="dinner-planner-logs-")
    config.addinivalue_line(
        "markers", "readonly: marks test as read-only (no file writes outside tmp_path)"
    )
    config.addinivalue_line(
        "markers", "slow: marks test as slow (may take >10 seconds)"
    )
