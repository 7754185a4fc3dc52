"""Core scheduling engine.

Steps are placed backwards from the serving time: a step is only placed once
every step depending on it has been placed, at the latest slot that ends no
later than the start of all of those successors and has free resources.
"""

import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from ..models.recipe import KitchenConfig, Recipe
from ..models.schedule import Schedule, ScheduledTask, UnschedulableStep
from ..models.trace import DecisionTrace, SchedulingDecision, StepFeatures
from ..policies.base import SchedulingPolicy
from ..policies.hot_priority import HotPriorityPolicy
from ..utils.config import get_default_config
from ..utils.datetime_utils import minutes_between, slot_end_time
from .graph import DependencyGraph, StepNode, add_implicit_prep, build_graph, compute_earliest_times
from .resources import ResourceAllocator, slots_needed

logger = logging.getLogger(__name__)


class Scheduler:
    """Backward, priority-ordered list scheduler."""

    def __init__(self, policy: SchedulingPolicy, config: dict):
        """Initialize scheduler with policy and configuration."""
        self.policy = policy
        self.config = config
        self.scheduling_config = config.get('scheduling', {})
        self.slot_minutes = self.scheduling_config.get('slot_minutes', 5)
        self.active_threshold = self.scheduling_config.get('active_threshold_minutes', 10)
        self.implicit_prep_minutes = self.scheduling_config.get('implicit_prep_minutes', 5)

    def schedule(
        self,
        recipes: List[Recipe],
        kitchen: KitchenConfig,
        target_time: datetime,
    ) -> Tuple[Schedule, DecisionTrace]:
        """Generate a schedule ending at target_time."""
        run_id = str(uuid.uuid4())[:8]

        taken = {s.step_id for r in recipes for s in r.steps}
        taken |= {d for r in recipes for s in r.steps for d in s.depends_on}
        expanded = []
        for recipe in recipes:
            recipe = add_implicit_prep(recipe, self.implicit_prep_minutes, taken)
            taken |= {s.step_id for s in recipe.steps}
            expanded.append(recipe)
        graph = build_graph(expanded)
        graph.check_acyclic()
        earliest = compute_earliest_times(graph)

        allocator = ResourceAllocator(kitchen, self.active_threshold)
        total_slots = sum(slots_needed(n.duration, self.slot_minutes) for n in graph.nodes.values())

        step_features = [
            StepFeatures(
                step_id=node.step_id,
                recipe_id=node.recipe_id,
                duration=node.duration,
                slot_count=slots_needed(node.duration, self.slot_minutes),
                earliest_start=earliest[node.step_id][0],
                earliest_finish=earliest[node.step_id][1],
                is_active=allocator.needs_cook(node.step.appliance, node.duration),
                priority_score=self.policy.priority_score(node),
            )
            for node in graph.nodes.values()
        ]

        tasks: List[ScheduledTask] = []
        unschedulable: List[UnschedulableStep] = []
        decisions: List[SchedulingDecision] = []
        assignments: Dict[str, Tuple[int, int]] = {}
        processed = set()

        ready = graph.sinks()
        queued = {node.step_id for node in ready}

        while ready:
            ready = self.policy.order_ready(ready)
            node = ready.pop(0)
            processed.add(node.step_id)

            anchor = self._anchor_slot(graph, node, assignments)
            placement = self._place(allocator, node, anchor, anchor + total_slots)

            if placement is None:
                # Hold the step's span so its predecessors still finish before it
                slot_count = slots_needed(node.duration, self.slot_minutes)
                assignments[node.step_id] = (anchor, anchor + slot_count - 1)
                reason = self._unschedulable_reason(kitchen, node)
                logger.warning("Could not schedule step %s (%s): %s", node.step_id, node.step.name, reason)
                unschedulable.append(UnschedulableStep(
                    step_id=node.step_id,
                    recipe_id=node.recipe_id,
                    step_name=node.step.name,
                    appliance=node.step.appliance,
                    reason=reason,
                ))
                decisions.append(SchedulingDecision(
                    step_id=node.step_id,
                    anchor_slot=anchor,
                    min_slot=None,
                    max_slot=None,
                    appliance_instance=None,
                    reason=reason,
                    constraint_applied="unschedulable",
                ))
            else:
                slot, instance = placement
                slot_count = slots_needed(node.duration, self.slot_minutes)
                assignments[node.step_id] = (slot, slot + slot_count - 1)
                tasks.append(self._make_task(node, instance, slot, slot_count, target_time))
                logger.debug("Placed %s at slots %d-%d on %s %d", node.step_id, slot, slot + slot_count - 1, node.step.appliance, instance)

                if slot > anchor:
                    reason = f"Delayed {slot - anchor} slots by resource contention"
                    constraint = "resource_contention"
                else:
                    reason = "Placed at latest permissible slot"
                    constraint = None
                decisions.append(SchedulingDecision(
                    step_id=node.step_id,
                    anchor_slot=anchor,
                    min_slot=slot,
                    max_slot=slot + slot_count - 1,
                    appliance_instance=instance,
                    reason=reason,
                    constraint_applied=constraint,
                ))

            # Enqueue predecessors whose successors are now all processed
            for dep_id in graph.predecessors(node.step_id):
                if dep_id in queued:
                    continue
                if all(s in processed for s in graph.successors[dep_id]):
                    ready.append(graph.nodes[dep_id])
                    queued.add(dep_id)

        schedule = self._assemble(run_id, expanded, graph, tasks, unschedulable, target_time)
        summary = self._compute_summary_stats(schedule, earliest, decisions)

        trace = DecisionTrace(
            run_id=run_id,
            timestamp=datetime.now(),
            policy_name=self.policy.get_policy_name(),
            config={
                'slot_minutes': self.slot_minutes,
                'active_threshold_minutes': self.active_threshold,
                'implicit_prep_minutes': self.implicit_prep_minutes,
                'kitchen': kitchen.to_dict(),
            },
            step_features=step_features,
            decisions=decisions,
            summary_stats=summary,
        )

        return schedule, trace

    def _anchor_slot(
        self,
        graph: DependencyGraph,
        node: StepNode,
        assignments: Dict[str, Tuple[int, int]],
    ) -> int:
        """First slot that ends no later than every placed successor starts."""
        anchor = 0
        for succ_id in graph.successors[node.step_id]:
            if succ_id in assignments:
                anchor = max(anchor, assignments[succ_id][1] + 1)
        return anchor

    def _place(
        self,
        allocator: ResourceAllocator,
        node: StepNode,
        anchor: int,
        horizon: int,
    ) -> Optional[Tuple[int, int]]:
        """Probe slots from anchor up to horizon; reserve and return (slot, instance)."""
        kind = node.step.appliance
        if allocator.kitchen.capacity_for(kind) == 0:
            return None

        slot_count = slots_needed(node.duration, self.slot_minutes)
        for slot in range(anchor, horizon + 1):
            available, instance = allocator.is_available(kind, slot, slot_count, node.duration)
            if available:
                allocator.reserve(kind, instance, slot, slot_count, node.duration)
                return slot, instance
        return None

    def _unschedulable_reason(self, kitchen: KitchenConfig, node: StepNode) -> str:
        kind = node.step.appliance
        if kitchen.capacity_for(kind) == 0:
            return f"No {kind} available in kitchen"
        return "No free appliance or cook within scheduling horizon"

    def _make_task(
        self,
        node: StepNode,
        instance: int,
        slot: int,
        slot_count: int,
        target_time: datetime,
    ) -> ScheduledTask:
        return ScheduledTask(
            step_id=node.step_id,
            recipe_id=node.recipe_id,
            recipe_name=node.recipe_name,
            step_name=node.step.name,
            appliance=node.step.appliance,
            appliance_instance=instance,
            start_time=slot_end_time(target_time, slot + slot_count, self.slot_minutes),
            end_time=slot_end_time(target_time, slot, self.slot_minutes),
            duration=node.duration,
            is_hot=node.is_hot,
            priority=node.priority,
            dependencies=list(node.dependencies),
        )

    def _assemble(
        self,
        run_id: str,
        recipes: List[Recipe],
        graph: DependencyGraph,
        tasks: List[ScheduledTask],
        unschedulable: List[UnschedulableStep],
        target_time: datetime,
    ) -> Schedule:
        """Turn placed tasks into a Schedule with elapsed time and errors."""
        earliest_start = min((t.start_time for t in tasks), default=target_time)

        warnings = [
            f"Step '{step_id}' depends on unknown step '{missing}'; treated as already done"
            for step_id, missing in graph.dangling
        ]
        errors = [
            f"Could not schedule step '{u.step_name}' ({u.step_id}) of recipe {u.recipe_id}: {u.reason}"
            for u in unschedulable
        ]

        return Schedule(
            schedule_id=run_id,
            target_time=target_time,
            recipes=recipes,
            tasks=tasks,
            total_elapsed_time=minutes_between(earliest_start, target_time),
            is_valid=not errors,
            validation_errors=errors,
            warnings=warnings,
            unschedulable=unschedulable,
        )

    def _compute_summary_stats(
        self,
        schedule: Schedule,
        earliest: Dict[str, Tuple[int, int]],
        decisions: List[SchedulingDecision],
    ) -> Dict[str, any]:
        """Compute summary statistics for the trace."""
        delayed = sum(1 for d in decisions if d.constraint_applied == "resource_contention")

        return {
            'steps_total': len(earliest),
            'steps_scheduled': len(schedule.tasks),
            'steps_unschedulable': len(schedule.unschedulable),
            'steps_delayed': delayed,
            'dangling_references': len(schedule.warnings),
            'critical_path_minutes': max((f for _, f in earliest.values()), default=0),
            'total_elapsed_minutes': schedule.total_elapsed_time,
        }


def generate_schedule(
    recipes: List[Recipe],
    kitchen: KitchenConfig,
    target_time: datetime,
    config: Optional[dict] = None,
) -> Schedule:
    """Schedule recipes with the default hot-priority policy."""
    config = config or get_default_config()
    scheduler = Scheduler(HotPriorityPolicy(config), config)
    schedule, _ = scheduler.schedule(recipes, kitchen, target_time)
    return schedule
