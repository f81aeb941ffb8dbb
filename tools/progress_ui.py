#!/usr/bin/env python3
"""
Rich Terminal UI for the Dinner Planner
=======================================

Renders pool summaries and planned schedules with the rich library.
"""

import time
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from meal_roles import RecipePools, covered_roles, format_roles

PLANNER_HEADER = "🍽️  DINNER PLANNER"


class PlannerUI:
    """Rich terminal output for a planning run."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def show_header(self, settings, dry_run: bool = False):
        lines = [
            f"Start: {settings.start_date.isoformat()}",
            f"Days: {settings.days}",
            f"No repeat: {settings.no_repeat_days}",
            f"Min roles covered: {settings.min_roles_covered}",
        ]
        if dry_run:
            lines.append("🔷 DRY RUN: no entries will be written")
        self.console.print(Panel("\n".join(lines), title=PLANNER_HEADER, border_style="blue"))

    def show_pools(self, pools: RecipePools, dinner_only: int = 0):
        counts = pools.summary()
        self.console.print(
            f"Pools -> complete:{counts['complete']} protein:{counts['protein']} "
            f"starch:{counts['starch']} veg:{counts['vegetable']} dinner only:{dinner_only}"
        )

    def show_schedule(self, schedule):
        """Table of dates, picks and covered roles. Skipped days are marked."""
        table = Table(title="Dinner Plan", show_lines=False)
        table.add_column("Date", style="cyan", no_wrap=True)
        table.add_column("Dinner")
        table.add_column("Covers", style="green")

        for day in schedule.days:
            if day.is_empty:
                table.add_row(day.date.isoformat(), "[yellow]No valid combination[/yellow]", "-")
                continue
            names = " + ".join(escape(recipe.name) for recipe in day.recipes)
            table.add_row(day.date.isoformat(), names, format_roles(covered_roles(day.recipes)))

        self.console.print(table)

    def show_summary(self, schedule, output_path=None, dry_run: bool = False):
        total = len(schedule.days)
        entries = len(schedule.to_entries())
        style = "green" if schedule.planned_days == total else "yellow"
        self.console.print(f"✅ Planned {schedule.planned_days}/{total} days ({entries} entries)", style=style)
        for skipped in schedule.skipped_days:
            self.console.print(f"⚠️  {skipped.isoformat()}: skipped", style="yellow")
        if dry_run:
            self.console.print("🔷 DRY RUN: entries not written")
        elif output_path:
            self.console.print(f"💾 Entries saved to: {output_path}")

    def show_error(self, title: str, message: str):
        self.console.print(Panel(escape(message), title=f"❌ {title}", border_style="red"))

    def create_timer(self, operation_name: str) -> 'Timer':
        return Timer(operation_name, self.console)


class Timer:
    """Simple timer for measuring operation duration."""

    def __init__(self, operation: str, console: Optional[Console] = None):
        self.operation = operation
        self.console = console or Console()
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None

    @property
    def duration(self) -> float:
        if self.start_time is None:
            return 0.0
        return (self.end_time or time.time()) - self.start_time

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.time()
        style = "green" if exc_type is None else "red"
        self.console.print(f"⏱️  {self.operation} in {self.duration:.2f}s", style=style)
