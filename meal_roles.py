"""
Meal roles and recipe pools.

A recipe satisfies zero or more nutritional roles (protein, starch, vegetable).
This module is intentionally lightweight (no I/O) so it can be used by:
- the recipe export loader
- the dinner planner
- tests

Pools are built once per planning run and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, List, Set, Tuple


class Role(str, Enum):
    """Nutritional role a recipe can satisfy. Closed set."""
    PROTEIN = "protein"
    STARCH = "starch"
    VEGETABLE = "vegetable"


ALL_ROLES: FrozenSet[Role] = frozenset(Role)


@dataclass(frozen=True)
class PlanRecipe:
    """Read-only view of a recipe as the planner sees it."""
    id: str
    name: str
    roles: FrozenSet[Role] = field(default_factory=frozenset)
    categories: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_complete(self) -> bool:
        """True when this single recipe covers protein, starch and vegetable."""
        return self.roles == ALL_ROLES

    @property
    def is_dinner(self) -> bool:
        return "dinner" in self.categories


@dataclass(frozen=True)
class RecipePools:
    """Role pools for one planning run."""
    protein: Tuple[PlanRecipe, ...] = ()
    starch: Tuple[PlanRecipe, ...] = ()
    vegetable: Tuple[PlanRecipe, ...] = ()
    complete: Tuple[PlanRecipe, ...] = ()

    def summary(self) -> dict:
        return {
            "complete": len(self.complete),
            "protein": len(self.protein),
            "starch": len(self.starch),
            "vegetable": len(self.vegetable),
        }


def build_recipe_pools(recipes: Iterable[PlanRecipe]) -> RecipePools:
    """
    Partition role-labelled recipes into the four planning pools.

    A recipe lands in every pool whose role it has, and in `complete` only
    when it has all three. Recipes with no roles are dropped. Input order is
    preserved within each pool.

    Args:
        recipes: Recipes with resolved roles

    Returns:
        RecipePools (all empty for empty input)
    """
    recipes = [r for r in recipes if r.roles]
    return RecipePools(
        protein=tuple(r for r in recipes if Role.PROTEIN in r.roles),
        starch=tuple(r for r in recipes if Role.STARCH in r.roles),
        vegetable=tuple(r for r in recipes if Role.VEGETABLE in r.roles),
        complete=tuple(r for r in recipes if r.is_complete),
    )


# =============================================================================
# ROLE HELPERS
# =============================================================================

def roles_gain(recipe: PlanRecipe, needed_roles: Set[Role]) -> int:
    """Count of still-needed roles this recipe would satisfy."""
    return count_intersect(recipe.roles, needed_roles)


def is_pure_for_needed(recipe: PlanRecipe, needed_roles: Set[Role]) -> bool:
    """True when the recipe has exactly one role and that role is needed."""
    return len(recipe.roles) == 1 and roles_gain(recipe, needed_roles) == 1


def covered_roles(picks: Iterable[PlanRecipe]) -> Set[Role]:
    """Union of roles across picks. Empty picks cover nothing."""
    covered: Set[Role] = set()
    for recipe in picks:
        covered.update(recipe.roles)
    return covered


def count_intersect(set_a: Iterable, set_b: Iterable) -> int:
    set_b = set(set_b)
    return sum(1 for value in set(set_a) if value in set_b)


def format_roles(roles: Iterable[Role]) -> str:
    """Stable, human-readable role list ("protein, starch")."""
    ordered: List[str] = [r.value for r in Role if r in set(roles)]
    return ", ".join(ordered) or "(none)"
