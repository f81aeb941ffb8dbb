"""Tests for the recipe export loader and meal plan history."""
import json
from datetime import date

import pytest

from meal_roles import Role
from recipe_source import (
    MealPlanHistory,
    RecipeSourceError,
    collect_tag_strings,
    filter_plannable,
    load_recipes,
    recipe_from_dict,
    resolve_categories,
    roles_from_tags,
    write_meal_plan_entries,
)

ROLE_TAGS = {"protein": "role:protein", "starch": "role:starch", "vegetable": "role:vegetable"}


class TestTagResolution:
    """Reading role tags off the shapes the recipe manager exports."""

    def test_collects_every_tag_shape(self):
        recipe = {
            "tags": ["Role:Protein", {"slug": "weeknight"}],
            "recipeTags": [{"name": "role:starch"}, {"tag": {"slug": "role:vegetable"}}],
            "recipe_tag": [{"tag": {"name": "Quick"}}],
        }
        assert collect_tag_strings(recipe) == [
            "role:protein", "weeknight", "role:starch", "role:vegetable", "quick",
        ]

    def test_ignores_non_list_tag_fields(self):
        assert collect_tag_strings({"tags": "role:protein", "tag": None}) == []

    def test_roles_from_tags(self):
        roles = roles_from_tags(["ROLE:PROTEIN", "role:vegetable", "spicy"], ROLE_TAGS)
        assert roles == frozenset({Role.PROTEIN, Role.VEGETABLE})

    def test_custom_role_slugs(self):
        tags = dict(ROLE_TAGS, starch="carb")
        assert roles_from_tags(["carb"], tags) == frozenset({Role.STARCH})


class TestRecipeFromDict:

    def test_merges_explicit_roles_and_tags(self):
        recipe = recipe_from_dict(
            {"id": "r1", "name": "Chicken Rice", "roles": ["protein", "dessert"], "tags": [{"slug": "role:starch"}]},
            ROLE_TAGS,
        )
        assert recipe.id == "r1"
        assert recipe.name == "Chicken Rice"
        assert recipe.roles == frozenset({Role.PROTEIN, Role.STARCH})

    def test_slug_is_used_when_id_missing(self):
        recipe = recipe_from_dict({"slug": "green-salad"}, ROLE_TAGS)
        assert recipe.id == "green-salad"
        assert recipe.name == "green-salad"

    def test_missing_id_raises(self):
        with pytest.raises(RecipeSourceError, match="no id"):
            recipe_from_dict({"name": "Mystery"}, ROLE_TAGS)

    @pytest.mark.parametrize("data,expected", [
        ({"category": "Dinner"}, {"dinner"}),
        ({"recipeCategory": [{"slug": "Sides"}]}, {"side"}),
        ({"recipeCategory": [{"name": "Breakfast"}]}, {"breakfast"}),
        ({"recipeCategory": ["side"]}, {"side"}),
        ({"recipeCategory": "Dinner"}, {"dinner"}),
        ({"categories": [{"slug": "quick"}, {"name": "Dinner"}]}, {"quick", "dinner"}),
        ({"category": "side", "recipeCategory": [{"slug": "vegetarian"}]}, {"side", "vegetarian"}),
        ({"recipeCategory": 3}, set()),
        ({}, set()),
    ])
    def test_resolve_categories(self, data, expected):
        assert resolve_categories(data) == frozenset(expected)

    @pytest.mark.parametrize("data,expected_id,expected_name", [
        ({"uid": "u1", "title": "Chili"}, "u1", "Chili"),
        ({"recipeId": "r9", "recipeName": "Stew"}, "r9", "Stew"),
        ({"_id": "x1"}, "x1", "x1"),
        ({"id": "a", "slug": "b", "name": "", "title": "Tacos"}, "a", "Tacos"),
    ])
    def test_id_and_name_fallback_fields(self, data, expected_id, expected_name):
        recipe = recipe_from_dict(data, ROLE_TAGS)
        assert recipe.id == expected_id
        assert recipe.name == expected_name

    def test_role_tags_match_ignoring_whitespace(self):
        recipe = recipe_from_dict({"id": "r", "tags": ["Role: Protein", {"name": "role : starch"}]}, ROLE_TAGS)
        assert recipe.roles == frozenset({Role.PROTEIN, Role.STARCH})

    def test_string_roles_value_is_a_single_role(self):
        assert recipe_from_dict({"id": "r", "roles": "Vegetable"}, ROLE_TAGS).roles == frozenset({Role.VEGETABLE})

    @pytest.mark.parametrize("roles", [3, {"protein": True}, 2.5])
    def test_malformed_roles_raise(self, roles):
        with pytest.raises(RecipeSourceError, match="roles must be"):
            recipe_from_dict({"id": "r", "roles": roles}, ROLE_TAGS)


class TestLoadRecipes:

    def test_json_list(self, tmp_path):
        path = tmp_path / "recipes.json"
        path.write_text(json.dumps([
            {"id": "a", "name": "A", "roles": ["protein"]},
            {"id": "a", "name": "A again", "roles": ["starch"]},
            {"name": "no id"},
            {"id": "b", "name": "B", "tags": ["role:vegetable"]},
        ]))
        recipes = load_recipes(path, ROLE_TAGS)
        assert [r.id for r in recipes] == ["a", "b"]
        assert recipes[0].name == "A"

    def test_yaml_items_wrapper(self, tmp_path):
        path = tmp_path / "recipes.yaml"
        path.write_text("items:\n  - id: m1\n    name: Shepherd's Pie\n    roles: [protein, starch, vegetable]\n")
        recipes = load_recipes(path, ROLE_TAGS)
        assert recipes[0].is_complete

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(RecipeSourceError, match="not found"):
            load_recipes(tmp_path / "nope.json", ROLE_TAGS)

    def test_malformed_file_raises(self, tmp_path):
        path = tmp_path / "recipes.json"
        path.write_text("{not json")
        with pytest.raises(RecipeSourceError, match="Could not parse"):
            load_recipes(path, ROLE_TAGS)

    def test_wrong_shape_raises(self, tmp_path):
        path = tmp_path / "recipes.json"
        path.write_text(json.dumps({"recipes": []}))
        with pytest.raises(RecipeSourceError, match="list"):
            load_recipes(path, ROLE_TAGS)

    def test_record_with_malformed_roles_is_skipped(self, tmp_path):
        path = tmp_path / "recipes.json"
        path.write_text(json.dumps([{"id": "a", "roles": 3}, {"id": "b", "roles": ["protein"]}]))
        recipes = load_recipes(path, ROLE_TAGS)
        assert [r.id for r in recipes] == ["b"]

    def test_directory_raises_source_error(self, tmp_path):
        with pytest.raises(RecipeSourceError, match="Could not read"):
            load_recipes(tmp_path, ROLE_TAGS)


class TestFilterPlannable:

    def test_keeps_allowed_and_uncategorised(self, recipe):
        recipes = [
            recipe("D", "p", categories=["dinner"]),
            recipe("S", "v", categories=["side"]),
            recipe("B", "s", categories=["breakfast"]),
            recipe("U", "s"),
        ]
        assert [r.id for r in filter_plannable(recipes, ["dinner", "side"])] == ["D", "S", "U"]

    def test_any_allowed_category_is_enough(self, recipe):
        quick_dinner = recipe("Q", "p", categories=["quick", "dinner"])
        dessert = recipe("X", "s", categories=["dessert", "baking"])
        assert filter_plannable([quick_dinner, dessert], ["dinner", "side"]) == [quick_dinner]

    def test_category_list_from_export_is_filtered(self):
        recipe = recipe_from_dict({"id": "r", "recipeCategory": [{"slug": "quick"}, {"slug": "dinner"}]}, ROLE_TAGS)
        assert filter_plannable([recipe], ["dinner", "side"]) == [recipe]


class TestMealPlanHistory:

    def test_list_entries_is_inclusive(self):
        history = MealPlanHistory([
            {"date": "2025-01-14", "entryType": "dinner", "recipeId": "old"},
            {"date": "2025-01-15", "entryType": "dinner", "recipeId": "first"},
            {"date": "2025-01-20T18:00:00", "entryType": "dinner", "recipeId": "last"},
            {"date": "2025-01-21", "entryType": "dinner", "recipeId": "after"},
            {"entryType": "dinner", "recipeId": "undated"},
        ])
        entries = history.list_entries(date(2025, 1, 15), date(2025, 1, 20))
        assert [e["recipeId"] for e in entries] == ["first", "last"]

    def test_missing_file_means_empty_history(self, tmp_path):
        history = MealPlanHistory.from_file(tmp_path / "missing.json")
        assert history.list_entries(date(2000, 1, 1), date(2100, 1, 1)) == []

    def test_yaml_dates_are_understood(self, tmp_path):
        path = tmp_path / "history.yaml"
        path.write_text("- date: 2025-01-16\n  entryType: dinner\n  recipeId: x\n")
        history = MealPlanHistory.from_file(path)
        assert len(history.list_entries(date(2025, 1, 16), date(2025, 1, 16))) == 1

    def test_directory_history_raises_source_error(self, tmp_path):
        folder = tmp_path / "history"
        folder.mkdir()
        with pytest.raises(RecipeSourceError, match="Could not read"):
            MealPlanHistory.from_file(folder)


class TestWriteMealPlanEntries:

    def test_writes_json_and_creates_parent(self, tmp_path):
        entries = [{"date": "2025-01-20", "entryType": "dinner", "recipeId": "a"}]
        path = write_meal_plan_entries(tmp_path / "out" / "plan.json", entries)
        assert json.loads(path.read_text()) == entries

    def test_unwritable_target_raises_source_error(self, tmp_path):
        target = tmp_path / "plan.json"
        target.mkdir()
        with pytest.raises(RecipeSourceError, match="Could not write"):
            write_meal_plan_entries(target, [])
