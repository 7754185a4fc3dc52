"""Schedule output models."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .recipe import Recipe


@dataclass
class ScheduledTask:
    """A step placed on a concrete appliance instance at absolute times."""

    step_id: str
    recipe_id: str
    recipe_name: str
    step_name: str
    appliance: str
    appliance_instance: int
    start_time: datetime
    end_time: datetime
    duration: int
    is_hot: bool
    priority: Optional[str] = None
    dependencies: List[str] = field(default_factory=list)

    @property
    def resource_label(self) -> str:
        """Display row for the task, e.g. 'stovetop 2' or 'preparation'."""
        if self.appliance_instance == 0:
            return self.appliance
        return f"{self.appliance} {self.appliance_instance}"


@dataclass
class UnschedulableStep:
    """A step the scheduler could not place within its horizon."""

    step_id: str
    recipe_id: str
    step_name: str
    appliance: str
    reason: str


@dataclass
class RecipeSummary:
    """First start and last finish of a recipe's tasks."""

    recipe_id: str
    recipe_name: str
    is_hot: bool
    start_time: datetime
    finish_time: datetime
    task_count: int


@dataclass
class Schedule:
    """Complete cooking plan for one target time."""

    schedule_id: str
    target_time: datetime
    recipes: List[Recipe]
    tasks: List[ScheduledTask]
    total_elapsed_time: float
    is_valid: bool = True
    validation_errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    unschedulable: List[UnschedulableStep] = field(default_factory=list)

    def task_for(self, step_id: str) -> Optional[ScheduledTask]:
        """Return the scheduled task for a step, if it was placed."""
        for task in self.tasks:
            if task.step_id == step_id:
                return task
        return None

    def recipe_summaries(self) -> List[RecipeSummary]:
        """Per-recipe start/finish, in recipe order."""
        summaries = []
        for recipe in self.recipes:
            tasks = [t for t in self.tasks if t.recipe_id == recipe.recipe_id]
            if not tasks:
                continue
            summaries.append(RecipeSummary(
                recipe_id=recipe.recipe_id,
                recipe_name=recipe.name,
                is_hot=recipe.is_hot,
                start_time=min(t.start_time for t in tasks),
                finish_time=max(t.end_time for t in tasks),
                task_count=len(tasks),
            ))
        return summaries

    def to_dict(self) -> Dict[str, Any]:
        """Convert schedule to dictionary for JSON export."""
        return asdict(self)

    def to_human_readable(self) -> str:
        """Generate a human-readable cooking plan."""
        lines = [
            f"=== Cooking Schedule: {self.schedule_id} ===",
            f"Serve at: {self.target_time:%Y-%m-%d %H:%M}",
            f"Total time: {self.total_elapsed_time:.0f} min",
            f"Valid: {self.is_valid}",
            "",
            "Tasks:",
        ]

        for task in sorted(self.tasks, key=lambda t: (t.start_time, t.end_time, t.step_id)):
            lines.append(
                f"  {task.start_time:%H:%M}-{task.end_time:%H:%M}  "
                f"{task.recipe_name}: {task.step_name} [{task.resource_label}]"
            )

        summaries = self.recipe_summaries()
        if summaries:
            lines.extend(["", "Recipes:"])
            for summary in summaries:
                serving = "hot" if summary.is_hot else "cold"
                lines.append(
                    f"  {summary.recipe_name} ({serving}): "
                    f"{summary.start_time:%H:%M} -> {summary.finish_time:%H:%M}"
                )

        if self.warnings:
            lines.extend(["", "Warnings:"])
            lines.extend(f"  {w}" for w in self.warnings)

        if self.validation_errors:
            lines.extend(["", "Errors:"])
            lines.extend(f"  {e}" for e in self.validation_errors)

        lines.append("=" * 50)

        return "\n".join(lines)
