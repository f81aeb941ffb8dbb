#!/usr/bin/env python3
"""
Dinner Planner - Role-Coverage Meal Selection
=============================================

Generates dinner plans from recipes labelled with nutritional roles
(protein, starch, vegetable).

For each date in the horizon:
1. Try a single "complete" recipe that covers all three roles
2. Otherwise build the dinner from several recipes with a greedy cover
   that prefers more needed roles, then fewer wasted roles
3. Skip recipes used recently (no-repeat window seeded from meal-plan history)

Picks on one day are excluded on every later day of the same run, so dates
are always planned one after another.

Usage:
    from config import PlanningSettings
    from meal_roles import build_recipe_pools
    from dinner_planner import plan_horizon

    pools = build_recipe_pools(recipes)
    schedule = plan_horizon(pools, history.list_entries, PlanningSettings.resolve())
    entries = schedule.to_entries()
"""

import random
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from config import DEFAULT_MIN_ROLES_COVERED, DINNER_ENTRY_TYPE, PlanningSettings
from meal_roles import (
    ALL_ROLES,
    PlanRecipe,
    RecipePools,
    Role,
    covered_roles,
    format_roles,
    is_pure_for_needed,
    roles_gain,
)
from tools.logging_utils import get_logger

logger = get_logger(__name__)

# (start_date, end_date) -> meal plan entries
ListEntries = Callable[[date, date], List[Dict[str, Any]]]

_default_rng = random.Random()


# =============================================================================
# SCHEDULE TYPES
# =============================================================================

@dataclass
class DayPlan:
    """Dinner picks for one date. Empty when no valid combination exists."""
    date: date
    recipes: List[PlanRecipe] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.recipes

    @property
    def recipe_ids(self) -> List[str]:
        return [r.id for r in self.recipes]


@dataclass
class Schedule:
    """Day plans in date order, one per date of the horizon."""
    days: List[DayPlan] = field(default_factory=list)

    @property
    def planned_days(self) -> int:
        return sum(1 for d in self.days if not d.is_empty)

    @property
    def skipped_days(self) -> List[date]:
        return [d.date for d in self.days if d.is_empty]

    def to_entries(self) -> List[Dict[str, str]]:
        """
        Flatten into meal plan entries ready for the caller to persist.

        Returns:
            [{"date": "YYYY-MM-DD", "entryType": "dinner", "recipeId": id}, ...]
        """
        return [
            {"date": day.date.isoformat(), "entryType": DINNER_ENTRY_TYPE, "recipeId": recipe.id}
            for day in self.days
            for recipe in day.recipes
        ]


# =============================================================================
# DATE HELPERS
# =============================================================================

def offset_date(start: date, delta_days: int) -> date:
    return start + timedelta(days=delta_days)


def range_days(start: date, count: int) -> List[date]:
    """Consecutive dates beginning at `start`. Empty for count <= 0."""
    return [offset_date(start, i) for i in range(max(count, 0))]


# =============================================================================
# CORE PLANNING LOGIC
# =============================================================================

def best_score_key(recipe: PlanRecipe, needed_roles: Set[Role], rng: random.Random) -> tuple:
    """
    Sort key for Best-Score ordering (smallest sorts first).

    Higher gain wins, then fewer total roles, then a random draw so equal
    candidates are not ordered by pool position.
    """
    return (-roles_gain(recipe, needed_roles), len(recipe.roles), rng.random())


def select_best_candidate(
    universe: List[PlanRecipe],
    used_ids: Set[str],
    needed_roles: Set[Role],
    rng: random.Random,
) -> Optional[PlanRecipe]:
    """
    Pick the next recipe for a component-built dinner.

    With one role left, a "pure" single-role recipe is preferred so nothing
    is wasted; otherwise the fewest-roles recipe carrying it. With two or more
    roles left, Best-Score ordering applies.

    Returns:
        The chosen recipe, or None if nothing contributes a needed role
    """
    candidates = [
        recipe for recipe in universe
        if recipe.id not in used_ids and roles_gain(recipe, needed_roles) > 0
    ]
    if not candidates:
        return None

    if len(needed_roles) == 1:
        pure = [recipe for recipe in candidates if is_pure_for_needed(recipe, needed_roles)]
        if pure:
            return rng.choice(pure)
        (needed_role,) = tuple(needed_roles)
        has_needed = [recipe for recipe in candidates if needed_role in recipe.roles]
        return min(has_needed, key=lambda recipe: (len(recipe.roles), rng.random()))

    return min(candidates, key=lambda recipe: best_score_key(recipe, needed_roles, rng))


def try_select_complete_meal(
    complete_pool: Iterable[PlanRecipe],
    recent_ids: Set[str],
    rng: random.Random,
) -> Optional[List[PlanRecipe]]:
    """
    Pick one recipe that covers all three roles and was not used recently.

    Side effect: adds the pick to `recent_ids`.

    Returns:
        Single-item list, or None when no complete meal is available
    """
    candidates = [recipe for recipe in complete_pool if recipe.id not in recent_ids]
    if not candidates:
        return None
    chosen = rng.choice(candidates)
    recent_ids.add(chosen.id)
    return [chosen]


def build_meal_from_components(
    pools: RecipePools,
    recent_ids: Set[str],
    rng: random.Random,
    min_roles_covered: int = DEFAULT_MIN_ROLES_COVERED,
) -> List[PlanRecipe]:
    """
    Build a dinner from several recipes, each contributing different roles.

    The result is accepted only when the picks cover at least
    `min_roles_covered` distinct roles; `recent_ids` is updated only then.

    Returns:
        Chosen recipes in pick order (empty when below the threshold)
    """
    needed_roles: Set[Role] = set(ALL_ROLES)

    universe: Dict[str, PlanRecipe] = {}
    for recipe in (*pools.protein, *pools.starch, *pools.vegetable):
        if recipe.id not in recent_ids and recipe.id not in universe:
            universe[recipe.id] = recipe
    candidates = list(universe.values())

    picks: List[PlanRecipe] = []
    used_ids: Set[str] = set()

    while needed_roles:
        best = select_best_candidate(candidates, used_ids, needed_roles, rng)
        if best is None:
            break
        picks.append(best)
        used_ids.add(best.id)
        needed_roles -= best.roles

    if len(covered_roles(picks)) < min_roles_covered:
        return []

    recent_ids.update(recipe.id for recipe in picks)
    return picks


def choose_dinner_for_date(
    day: date,
    pools: RecipePools,
    recent_ids: Set[str],
    rng: Optional[random.Random] = None,
    min_roles_covered: int = DEFAULT_MIN_ROLES_COVERED,
) -> List[PlanRecipe]:
    """
    Select dinner recipes for one date.

    Strategy 1 is a single complete meal; strategy 2 builds the dinner from
    role components. The component pools are not consulted when strategy 1
    succeeds.

    Args:
        day: Date being planned (used for logging only)
        pools: Role pools for this run
        recent_ids: Recipe ids to avoid; updated in place on success
        rng: Randomness source for tie-breaks
        min_roles_covered: Coverage needed for a component-built dinner

    Returns:
        Chosen recipes, or [] when no adequate combination exists
    """
    rng = rng or _default_rng

    complete_meal = try_select_complete_meal(pools.complete, recent_ids, rng)
    if complete_meal:
        logger.debug(f"🔍 {day.isoformat()}: complete meal {complete_meal[0].name!r}")
        return complete_meal

    return build_meal_from_components(pools, recent_ids, rng, min_roles_covered)


# =============================================================================
# HORIZON PLANNING
# =============================================================================

def _entry_recipe_id(entry: Dict[str, Any]) -> Optional[str]:
    recipe_id = entry.get("recipeId") or entry.get("recipe_id")
    if recipe_id:
        return str(recipe_id)
    recipe = entry.get("recipe")
    if isinstance(recipe, dict) and recipe.get("id"):
        return str(recipe["id"])
    return None


def seed_recency_set(entries: Iterable[Dict[str, Any]]) -> Set[str]:
    """Recipe ids of historical dinner entries that reference a recipe."""
    recent_ids: Set[str] = set()
    for entry in entries:
        if entry.get("entryType") != DINNER_ENTRY_TYPE:
            continue
        recipe_id = _entry_recipe_id(entry)
        if recipe_id:
            recent_ids.add(recipe_id)
    return recent_ids


def plan_horizon(
    pools: RecipePools,
    list_entries: ListEntries,
    settings: PlanningSettings,
    rng: Optional[random.Random] = None,
    recent_ids: Optional[Set[str]] = None,
) -> Schedule:
    """
    Plan dinners for every date in [start, start + days).

    The history window [start - no_repeat_days, start + days - 1] is queried
    once up front. Dates are planned strictly in order and share one recency
    set, so a pick on day N is excluded from day N+1 onward. Unfulfillable
    days become empty DayPlans; they never stop the run.

    Args:
        pools: Role pools built once for this run
        list_entries: History query (start, end) -> meal plan entries
        settings: Validated planning settings
        rng: Randomness source for tie-breaks
        recent_ids: Optional set to thread through the run (seeded in place)

    Returns:
        Schedule with one DayPlan per date

    Raises:
        PlannerConfigError: If settings are invalid
    """
    settings.validate()
    rng = rng or _default_rng
    recent_ids = set() if recent_ids is None else recent_ids

    dates = range_days(settings.start_date, settings.days)
    if not dates:
        logger.info("📊 Nothing to plan (0 days requested)")
        return Schedule()

    window_start = offset_date(settings.start_date, -settings.no_repeat_days)
    window_end = dates[-1]
    history = list_entries(window_start, window_end) or []
    recent_ids.update(seed_recency_set(history))
    logger.info(
        f"📊 History {window_start.isoformat()}..{window_end.isoformat()}: "
        f"{len(history)} entries, {len(recent_ids)} recent dinner recipes"
    )

    schedule = Schedule()
    for day in dates:
        chosen = choose_dinner_for_date(day, pools, recent_ids, rng, settings.min_roles_covered)
        schedule.days.append(DayPlan(date=day, recipes=chosen))

        if not chosen:
            logger.warning(f"⚠️ {day.isoformat()}: No valid combination found. Skipping.")
            continue

        logger.debug(f"🔍 {day.isoformat()} -> picks: {[r.name for r in chosen]}")
        logger.debug(f"🔍 {day.isoformat()} covers: {format_roles(covered_roles(chosen))}")

    logger.info(f"✅ Planned {schedule.planned_days}/{len(dates)} days")
    return schedule
