#!/usr/bin/env python3
"""
Dinner Planner CLI
==================

Plans dinners from a role-tagged recipe export, avoiding recipes used in the
no-repeat window of the meal plan history, and writes the planned entries as
JSON for import into the recipe manager.

USAGE:
    python plan_dinner.py                                   # Plan 7 days from today
    python plan_dinner.py --start 2025-08-27 --days 7 --norepeat 5 --dry-run
    python plan_dinner.py --recipes export.json --history mealplans.json --output plan.json
    python plan_dinner.py --min-roles 3                     # Require all three roles
    python plan_dinner.py --seed 42                         # Reproducible tie-breaks

Exit codes:
    0 success, 1 input or output file error, 2 configuration error, 130 interrupted
"""

import sys
import random
import argparse
from typing import List, Optional

from config import (
    PlannerConfigError,
    PlanningSettings,
    get_history_path,
    get_output_path,
    get_recipes_path,
    print_config_summary,
)
from dinner_planner import plan_horizon
from meal_roles import build_recipe_pools
from recipe_source import (
    MealPlanHistory,
    RecipeSourceError,
    filter_plannable,
    load_recipes,
    write_meal_plan_entries,
)
from tools.logging_utils import get_logger
from tools.progress_ui import PlannerUI

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Plan dinners that cover protein, starch and vegetable roles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python plan_dinner.py --start 2025-01-20 --days 7 --dry-run
    python plan_dinner.py --norepeat 3 --output data/planned_entries.json
        """
    )
    parser.add_argument("--start", metavar="YYYY-MM-DD", help="First date to plan (default: today)")
    parser.add_argument("--days", metavar="N", help="Number of days to plan (default: 7)")
    parser.add_argument("--norepeat", metavar="N", help="Days a recipe must rest before reuse (default: 5)")
    parser.add_argument("--min-roles", metavar="N", dest="min_roles",
                        help="Roles a multi-recipe dinner must cover (default: 2)")
    parser.add_argument("--recipes", metavar="PATH", help="Recipe export (JSON or YAML)")
    parser.add_argument("--history", metavar="PATH", help="Meal plan history (JSON or YAML)")
    parser.add_argument("--output", metavar="PATH", help="Where to write planned entries")
    parser.add_argument("--dry-run", action="store_true", help="Show the plan without writing entries")
    parser.add_argument("--seed", type=int, help="Seed for tie-break randomness")
    return parser


def main(argv: Optional[List[str]] = None, ui: Optional[PlannerUI] = None) -> int:
    args = build_parser().parse_args(argv)
    ui = ui or PlannerUI()

    try:
        settings = PlanningSettings.resolve(
            start=args.start,
            days=args.days,
            no_repeat_days=args.norepeat,
            min_roles_covered=args.min_roles,
        )
    except PlannerConfigError as e:
        logger.error(f"❌ Invalid configuration: {e}")
        ui.show_error("Invalid configuration", str(e))
        return 2

    ui.show_header(settings, dry_run=args.dry_run)
    print_config_summary(settings)

    recipes_path = args.recipes or get_recipes_path()
    history_path = args.history or get_history_path()
    try:
        recipes = filter_plannable(load_recipes(recipes_path))
        history = MealPlanHistory.from_file(history_path)
    except RecipeSourceError as e:
        logger.error(f"❌ Could not load input: {e}")
        ui.show_error("Could not load input", str(e))
        return 1

    pools = build_recipe_pools(recipes)
    dinner_only = sum(1 for r in recipes if r.roles and r.is_dinner)
    counts = pools.summary()
    logger.info(
        f"📊 Pools -> complete:{counts['complete']} protein:{counts['protein']} "
        f"starch:{counts['starch']} veg:{counts['vegetable']} dinner only:{dinner_only}"
    )
    ui.show_pools(pools, dinner_only)

    rng = random.Random(args.seed)
    with ui.create_timer("Planning"):
        schedule = plan_horizon(pools, history.list_entries, settings, rng=rng)

    ui.show_schedule(schedule)

    entries = schedule.to_entries()
    output_path = None
    if args.dry_run:
        for day in schedule.days:
            for recipe in day.recipes:
                logger.info(f"[dry] {day.date.isoformat()} dinner -> {recipe.name}")
    else:
        try:
            output_path = write_meal_plan_entries(args.output or get_output_path(), entries)
        except RecipeSourceError as e:
            logger.error(f"❌ Could not write entries: {e}")
            ui.show_error("Could not write entries", str(e))
            return 1

    ui.show_summary(schedule, output_path=output_path, dry_run=args.dry_run)
    logger.info("[done]")
    return 0


def run():
    """Console-script entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\n⚠️  Operation cancelled by user")
        sys.exit(130)


if __name__ == "__main__":
    run()
