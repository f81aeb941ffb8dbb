#!/usr/bin/env python3
"""
Recipe Export & Meal Plan History
=================================

File-backed collaborators for the dinner planner:
- Reads a recipe export (JSON or YAML) and resolves role tags into Roles
- Reads meal plan history and answers date-range queries
- Writes planned entries for a downstream importer

Recipe exports come in the shapes the recipe manager produces; tags may be
plain strings, {slug, name} objects, or nested {tag: {...}} objects under
`tags`, `recipeTags`, `recipe_tag` or `tag`. All of that is resolved here so
the planner only ever sees `PlanRecipe.roles`.

Usage:
    from recipe_source import load_recipes, filter_plannable, MealPlanHistory

    recipes = filter_plannable(load_recipes("data/recipes.json"))
    history = MealPlanHistory.from_file("data/mealplans.json")
    entries = history.list_entries(start, end)
"""

import json
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Union

import yaml

from config import get_plan_categories, get_role_tags
from meal_roles import PlanRecipe, Role
from tools.logging_utils import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]

_TAG_FIELDS = ("tags", "recipeTags", "recipe_tag", "tag")
_CATEGORY_FIELDS = ("category", "categories", "recipeCategory")
_ID_FIELDS = ("id", "slug", "uid", "recipeId", "_id")
_NAME_FIELDS = ("name", "title", "recipeName")


# =============================================================================
# EXCEPTIONS
# =============================================================================

class RecipeSourceError(Exception):
    """
    Raised when an input file cannot be read or has the wrong shape.

    Attributes:
        message: Human-readable error description
        path: File that failed
        details: Additional context
    """

    def __init__(self, message: str, path: Optional[PathLike] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.path = str(path) if path is not None else None
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.path:
            parts.insert(0, f"[{self.path}]")
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"({detail_str})")
        return " ".join(parts)


# =============================================================================
# FILE HELPERS
# =============================================================================

def _read_document(path: PathLike) -> Any:
    """Parse a JSON or YAML file (chosen by extension)."""
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                return yaml.safe_load(f)
            return json.load(f)
    except FileNotFoundError as e:
        raise RecipeSourceError("File not found", path) from e
    except OSError as e:
        raise RecipeSourceError("Could not read file", path, {"error": e.strerror or e}) from e
    except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
        raise RecipeSourceError("Could not parse file", path, {"error": e}) from e


def _items(data: Any, path: PathLike) -> List[Dict[str, Any]]:
    """Accept a bare list or a paginated {"items": [...]} wrapper."""
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("items")
    if not isinstance(data, list):
        raise RecipeSourceError("Expected a list of items", path, {"type": type(data).__name__})
    return [item for item in data if isinstance(item, dict)]


# =============================================================================
# ROLE / CATEGORY RESOLUTION
# =============================================================================

def _tag_strings(tag: Any) -> List[str]:
    if isinstance(tag, str):
        return [tag]
    if not isinstance(tag, dict):
        return []
    strings = [tag.get("slug"), tag.get("name")]
    nested = tag.get("tag")
    if isinstance(nested, dict):
        strings += [nested.get("slug"), nested.get("name")]
    return [s for s in strings if isinstance(s, str) and s]


def collect_tag_strings(recipe: Dict[str, Any]) -> List[str]:
    """Lower-cased tag slugs/names from every tag shape on the recipe."""
    strings = []
    for field_name in _TAG_FIELDS:
        tags = recipe.get(field_name)
        if not isinstance(tags, list):
            continue
        for tag in tags:
            for value in _tag_strings(tag):
                value = value.strip().lower()
                if value and value not in strings:
                    strings.append(value)
    return strings


def _tag_key(value: Any) -> str:
    # "Role: Protein" and "role:protein" name the same tag
    return "".join(str(value).split()).lower()


def roles_from_tags(tag_strings: Iterable[str], role_tags: Optional[Dict[str, str]] = None) -> frozenset:
    """
    Map tag slugs/names to Roles.

    Matching ignores case and whitespace.

    Args:
        tag_strings: Tag slugs or names
        role_tags: role -> tag slug (defaults to config)

    Returns:
        frozenset of Role
    """
    role_tags = role_tags or get_role_tags()
    by_tag = {_tag_key(slug): Role(role) for role, slug in role_tags.items()}
    roles = set()
    for value in tag_strings:
        role = by_tag.get(_tag_key(value))
        if role:
            roles.add(role)
    return frozenset(roles)


def _explicit_roles(recipe: Dict[str, Any]) -> frozenset:
    values = recipe.get("roles")
    if values is None:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, list):
        raise RecipeSourceError("Recipe roles must be a string or a list",
                                details={"name": recipe.get("name"), "roles": values})
    roles = set()
    for value in values:
        try:
            roles.add(Role(str(value).strip().lower()))
        except ValueError:
            logger.debug(f"🔍 Ignoring unknown role {value!r} on {recipe.get('name')!r}")
    return frozenset(roles)


def _normalise_category(value: str) -> str:
    value = value.strip().lower()
    return "side" if value == "sides" else value


def _category_values(value: Any) -> List[str]:
    if isinstance(value, (str, dict)):
        value = [value]
    if not isinstance(value, list):
        return []
    names = []
    for cat in value:
        if isinstance(cat, dict):
            cat = cat.get("slug") or cat.get("name")
        if isinstance(cat, str) and cat.strip():
            names.append(_normalise_category(cat))
    return names


def resolve_categories(recipe: Dict[str, Any]) -> FrozenSet[str]:
    """
    Every meal category on the recipe.

    Reads `category`, `categories` and `recipeCategory`; each may be a single
    name, a {slug, name} object, or a list of either.
    """
    categories = set()
    for field_name in _CATEGORY_FIELDS:
        categories.update(_category_values(recipe.get(field_name)))
    return frozenset(categories)


def recipe_from_dict(recipe: Dict[str, Any], role_tags: Optional[Dict[str, str]] = None) -> PlanRecipe:
    """
    Convert one exported recipe into a PlanRecipe.

    Roles come from an explicit `roles` list and from role tags; both are merged.

    Raises:
        RecipeSourceError: If the recipe has no id or its roles are malformed
    """
    recipe_id = next((recipe.get(key) for key in _ID_FIELDS if recipe.get(key)), None)
    name = next((recipe.get(key) for key in _NAME_FIELDS if recipe.get(key)), None)
    if not recipe_id:
        raise RecipeSourceError("Recipe has no id", details={"name": name})
    roles = _explicit_roles(recipe) | roles_from_tags(collect_tag_strings(recipe), role_tags)
    return PlanRecipe(
        id=str(recipe_id),
        name=str(name or recipe_id),
        roles=roles,
        categories=resolve_categories(recipe),
    )


def load_recipes(path: PathLike, role_tags: Optional[Dict[str, str]] = None) -> List[PlanRecipe]:
    """
    Load a recipe export, de-duplicated by id (first occurrence wins).

    Raises:
        RecipeSourceError: If the file is missing or malformed
    """
    items = _items(_read_document(path), path)
    recipes: Dict[str, PlanRecipe] = {}
    skipped = 0
    for item in items:
        try:
            recipe = recipe_from_dict(item, role_tags)
        except RecipeSourceError as e:
            logger.warning(f"⚠️ Skipping recipe: {e}")
            skipped += 1
            continue
        recipes.setdefault(recipe.id, recipe)

    with_roles = sum(1 for r in recipes.values() if r.roles)
    logger.info(f"📄 Loaded {len(recipes)} recipes from {path} ({with_roles} with roles, {skipped} skipped)")
    return list(recipes.values())


def filter_plannable(recipes: Iterable[PlanRecipe], categories: Optional[Iterable[str]] = None) -> List[PlanRecipe]:
    """Keep recipes sharing a category with the plannable ones (or with no category at all)."""
    allowed = {c.lower() for c in (categories if categories is not None else get_plan_categories())}
    return [r for r in recipes if not r.categories or r.categories & allowed]


# =============================================================================
# MEAL PLAN HISTORY
# =============================================================================

def _entry_date(entry: Dict[str, Any]) -> Optional[date]:
    value = entry.get("date")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


class MealPlanHistory:
    """In-memory meal plan entries answering inclusive date-range queries."""

    def __init__(self, entries: Optional[List[Dict[str, Any]]] = None):
        self.entries = list(entries or [])

    @classmethod
    def from_file(cls, path: Optional[PathLike]) -> "MealPlanHistory":
        """Load history; a missing file means no history."""
        if path is None or not Path(path).exists():
            logger.info(f"📄 No meal plan history at {path}; starting fresh")
            return cls()
        entries = _items(_read_document(path), path)
        logger.info(f"📄 Loaded {len(entries)} meal plan entries from {path}")
        return cls(entries)

    def list_entries(self, start_date: date, end_date: date) -> List[Dict[str, Any]]:
        """Entries dated within [start_date, end_date]. Undated entries are ignored."""
        result = []
        for entry in self.entries:
            entry_date = _entry_date(entry)
            if entry_date is not None and start_date <= entry_date <= end_date:
                result.append(entry)
        return result


def write_meal_plan_entries(path: PathLike, entries: List[Dict[str, Any]]) -> Path:
    """
    Write planned entries as a JSON list, creating parent directories.

    Raises:
        RecipeSourceError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(entries, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise RecipeSourceError("Could not write file", path, {"error": e.strerror or e}) from e
    logger.info(f"💾 Wrote {len(entries)} meal plan entries to {path}")
    return path
