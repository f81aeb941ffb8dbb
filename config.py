"""
Configuration module for the Role-Coverage Dinner Planner
=========================================================

This module centralizes all configuration for the dinner planner:
- Planning knobs (horizon length, no-repeat window, coverage threshold)
- Role tag slugs used to read role labels off exported recipes
- Input/output file locations
- Logging configuration

CONFIGURATION:
- data/config.yaml: User-specific settings (falls back to config.yaml.example)
- Environment variables override config.yaml for the planning knobs
- CLI arguments override both

Usage:
    from config import PlanningSettings, PlannerConfigError

    settings = PlanningSettings.resolve(start="2025-01-20", days=7)
    settings.validate()
"""

import os
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


# =============================================================================
# EXCEPTIONS
# =============================================================================

class PlannerConfigError(ValueError):
    """Raised when configuration is malformed. Always raised before planning starts."""


def _boxed(title: str, *lines: str) -> str:
    body = "\n".join(lines)
    return (
        f"\n{'='*60}\n"
        f"ERROR: {title}\n"
        f"{'='*60}\n"
        f"{body}\n"
        f"{'='*60}"
    )


# =============================================================================
# USER CONFIGURATION LOADING
# =============================================================================

# Project root directory (where this file lives)
PROJECT_ROOT = Path(__file__).parent

# Data directory - canonical location for runtime data (config, logs, exports)
DATA_DIR = PROJECT_ROOT / "data"

CONFIG_PATH = DATA_DIR / "config.yaml"

EXAMPLE_CONFIG_PATH = PROJECT_ROOT / "config.yaml.example"


def _load_user_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load user configuration from data/config.yaml.

    When the file does not exist, config.yaml.example is read instead so a
    fresh checkout plans with the documented defaults. Neither file is written.

    Args:
        config_path: Override path (used by tests)

    Returns:
        Dict containing user configuration (may be empty)

    Raises:
        PlannerConfigError: If the YAML is invalid or not a mapping
    """
    path = Path(config_path) if config_path else CONFIG_PATH
    if not path.exists():
        if config_path is None and EXAMPLE_CONFIG_PATH.exists():
            path = EXAMPLE_CONFIG_PATH
        else:
            return {}

    try:
        with open(path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PlannerConfigError(_boxed(
            "config.yaml has invalid YAML syntax",
            f"File: {path}",
            f"Error: {e}",
        )) from e

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise PlannerConfigError(_boxed(
            "config.yaml must be a mapping of sections",
            f"File: {path}",
            f"Got: {type(config).__name__}",
        ))

    for section in ("planning", "roles", "files"):
        value = config.get(section)
        if value is not None and not isinstance(value, dict):
            raise PlannerConfigError(_boxed(
                f"config.yaml section '{section}' must be a mapping",
                f"File: {path}",
            ))

    categories = (config.get("planning") or {}).get("categories")
    if categories is not None and not isinstance(categories, list):
        raise PlannerConfigError(_boxed(
            "config.yaml planning.categories must be a list",
            f"File: {path}",
        ))

    return config


# Load user config at module initialization (FAIL FAST on malformed YAML)
USER_CONFIG = _load_user_config()

logger = logging.getLogger(__name__)


def get_config_value(section: str, key: str, default=None):
    """
    Read a single value from USER_CONFIG.

    Args:
        section: Top-level section name (e.g. "planning")
        key: Key inside the section
        default: Returned when the section or key is absent

    Returns:
        The configured value or default
    """
    return (USER_CONFIG.get(section) or {}).get(key, default)


# =============================================================================
# MEAL PLANNING CONFIGURATION
# =============================================================================
"""
Controls the dinner planning algorithm behavior.
"""

DEFAULT_DAYS = 7  # Plan for one week at a time
DEFAULT_NO_REPEAT_DAYS = 5  # Recipes used in this many prior days are skipped
DEFAULT_MIN_ROLES_COVERED = 2  # Set to 3 to require protein+starch+vegetable

# Recipe categories considered for dinner planning
DEFAULT_PLAN_CATEGORIES = ["dinner", "side"]

# Meal plan entry type written and read back from history
DINNER_ENTRY_TYPE = "dinner"

# Role -> tag slug used by the recipe manager
DEFAULT_ROLE_TAGS = {
    "protein": "role:protein",
    "starch": "role:starch",
    "vegetable": "role:vegetable",
}


def get_role_tags() -> Dict[str, str]:
    """Role tag slugs, with any overrides from the `roles` section applied."""
    tags = dict(DEFAULT_ROLE_TAGS)
    for role, slug in (USER_CONFIG.get("roles") or {}).items():
        if role in tags and slug:
            tags[role] = str(slug).lower()
    return tags


def get_plan_categories() -> List[str]:
    """Recipe categories eligible for planning (lower-cased)."""
    categories = get_config_value("planning", "categories", DEFAULT_PLAN_CATEGORIES)
    return [str(c).lower() for c in categories]


# =============================================================================
# FILE LOCATIONS
# =============================================================================

def _project_path(key: str, default: Path) -> Path:
    """Configured file path; relative paths are taken from the project root."""
    path = Path(get_config_value("files", key, str(default)))
    return path if path.is_absolute() else PROJECT_ROOT / path


def get_recipes_path() -> Path:
    return _project_path("recipes", DATA_DIR / "recipes.json")


def get_history_path() -> Path:
    return _project_path("history", DATA_DIR / "mealplans.json")


def get_output_path() -> Path:
    return _project_path("output", DATA_DIR / "planned_entries.json")


# =============================================================================
# PLANNING SETTINGS
# =============================================================================

def _parse_date(value: Any, name: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise PlannerConfigError(f"{name} must be an ISO date (YYYY-MM-DD), got {value!r}") from e


def _parse_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise PlannerConfigError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise PlannerConfigError(f"{name} must be an integer, got {value!r}") from e


def _first_set(*values):
    for value in values:
        if value is not None and value != "":
            return value
    return None


@dataclass
class PlanningSettings:
    """Resolved, validated knobs for one planning run."""
    start_date: date = field(default_factory=date.today)
    days: int = DEFAULT_DAYS
    no_repeat_days: int = DEFAULT_NO_REPEAT_DAYS
    min_roles_covered: int = DEFAULT_MIN_ROLES_COVERED

    @classmethod
    def resolve(
        cls,
        start=None,
        days=None,
        no_repeat_days=None,
        min_roles_covered=None,
        environ: Optional[Dict[str, str]] = None,
    ) -> "PlanningSettings":
        """
        Build settings from CLI values, environment and config.yaml.

        Precedence: explicit argument > environment variable > `planning`
        section of config.yaml > built-in default.

        Raises:
            PlannerConfigError: If any value is malformed
        """
        env = os.environ if environ is None else environ
        planning = USER_CONFIG.get("planning") or {}

        start_value = _first_set(start, env.get("START_DATE"), planning.get("start_date"))
        days_value = _first_set(days, env.get("DAYS"), planning.get("days"), DEFAULT_DAYS)
        norepeat_value = _first_set(
            no_repeat_days, env.get("NO_REPEAT_DAYS"), planning.get("no_repeat_days"), DEFAULT_NO_REPEAT_DAYS
        )
        min_roles_value = _first_set(
            min_roles_covered, env.get("MIN_ROLES_COVERED"), planning.get("min_roles_covered"),
            DEFAULT_MIN_ROLES_COVERED,
        )

        settings = cls(
            start_date=_parse_date(start_value, "start date") if start_value is not None else date.today(),
            days=_parse_int(days_value, "days"),
            no_repeat_days=_parse_int(norepeat_value, "no-repeat days"),
            min_roles_covered=_parse_int(min_roles_value, "minimum roles covered"),
        )
        settings.validate()
        return settings

    def validate(self) -> "PlanningSettings":
        """
        Fail fast on values that would produce a wrong schedule.

        Raises:
            PlannerConfigError: On the first invalid field
        """
        if not isinstance(self.start_date, date):
            raise PlannerConfigError(f"start date must be a date, got {self.start_date!r}")
        for name, value in (("days", self.days), ("no-repeat days", self.no_repeat_days)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise PlannerConfigError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise PlannerConfigError(f"{name} must be >= 0, got {value}")
        if isinstance(self.min_roles_covered, bool) or not isinstance(self.min_roles_covered, int):
            raise PlannerConfigError(f"minimum roles covered must be an integer, got {self.min_roles_covered!r}")
        if not 1 <= self.min_roles_covered <= 3:
            raise PlannerConfigError(
                f"minimum roles covered must be between 1 and 3, got {self.min_roles_covered}"
            )
        return self


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================
"""Centralized logging configuration for all modules."""

# PLANNER_LOG_DIR relocates the log directory
LOG_DIR = Path(os.environ.get("PLANNER_LOG_DIR") or DATA_DIR / "logs")

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        },
        "detailed": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "INFO",
            "formatter": "standard",
            "stream": "ext://sys.stdout"
        },
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "detailed",
            "filename": str(LOG_DIR / "dinner_planner.log"),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5
        }
    },
    "root": {
        "level": "DEBUG",
        "handlers": ["console", "file"]
    }
}


def print_config_summary(settings: PlanningSettings) -> None:
    """Log the effective planning configuration."""
    logger.info(f"🔧 Start: {settings.start_date.isoformat()}")
    logger.info(f"🔧 Days: {settings.days}")
    logger.info(f"🔧 No repeat: {settings.no_repeat_days}")
    logger.info(f"🔧 Min roles covered: {settings.min_roles_covered}")
