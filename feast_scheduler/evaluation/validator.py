"""Schedule validation against kitchen constraints."""

from collections import defaultdict
from typing import Dict, List, Optional

from ..engine.resources import is_active
from ..models.recipe import UNLIMITED_KINDS, KitchenConfig
from ..models.schedule import Schedule, ScheduledTask
from ..utils.datetime_utils import minutes_between


def _overlaps(a: ScheduledTask, b: ScheduledTask) -> bool:
    return a.start_time < b.end_time and b.start_time < a.end_time


def validate_schedule(
    schedule: Schedule,
    kitchen: KitchenConfig,
    config: Optional[dict] = None,
) -> List[str]:
    """Check a schedule for ordering, double-booking and capacity violations.

    Returns a list of error messages; an empty list means the schedule holds.
    """
    config = config or {}
    threshold = config.get('scheduling', {}).get('active_threshold_minutes', 10)
    errors = []

    by_step = {t.step_id: t for t in schedule.tasks}

    for task in schedule.tasks:
        if task.end_time > schedule.target_time:
            errors.append(f"Task {task.step_id} ends after the target time")
        for dep_id in task.dependencies:
            dep = by_step.get(dep_id)
            if dep is not None and dep.end_time > task.start_time:
                errors.append(f"Task {task.step_id} starts before its dependency {dep_id} ends")

    instances: Dict[str, List[ScheduledTask]] = defaultdict(list)
    for task in schedule.tasks:
        if task.appliance in UNLIMITED_KINDS:
            continue
        capacity = kitchen.capacity_for(task.appliance)
        if not 1 <= task.appliance_instance <= capacity:
            errors.append(
                f"Task {task.step_id} uses {task.appliance} {task.appliance_instance} "
                f"but the kitchen has {capacity}"
            )
        instances[f"{task.appliance}-{task.appliance_instance}"].append(task)

    for resource_id, tasks in instances.items():
        tasks = sorted(tasks, key=lambda t: t.start_time)
        for prev, cur in zip(tasks, tasks[1:]):
            if _overlaps(prev, cur):
                errors.append(f"{resource_id} double-booked by {prev.step_id} and {cur.step_id}")

    active = [t for t in schedule.tasks if is_active(t.appliance, t.duration, threshold)]
    instants = sorted({t.start_time for t in active})
    for instant in instants:
        busy = [t for t in active if t.start_time <= instant < t.end_time]
        if len(busy) > kitchen.cooks:
            errors.append(
                f"{len(busy)} active tasks at {instant:%H:%M} exceed {kitchen.cooks} cooks"
            )

    return errors


def hot_finish_lag(schedule: Schedule) -> Dict[str, float]:
    """Minutes between each hot recipe's last finish and the target time."""
    lag = {}
    for summary in schedule.recipe_summaries():
        if summary.is_hot:
            lag[summary.recipe_id] = minutes_between(summary.finish_time, schedule.target_time)
    return lag
