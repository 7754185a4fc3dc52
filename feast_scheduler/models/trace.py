"""Decision trace models for observability."""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Dict, List, Optional, Any


@dataclass
class StepFeatures:
    """Computed features for a step during scheduling."""

    step_id: str
    recipe_id: str
    duration: int
    slot_count: int
    earliest_start: int
    earliest_finish: int
    is_active: bool
    priority_score: float


@dataclass
class SchedulingDecision:
    """Records a single placement decision."""

    step_id: str
    anchor_slot: int
    min_slot: Optional[int]
    max_slot: Optional[int]
    appliance_instance: Optional[int]
    reason: str
    constraint_applied: Optional[str] = None


@dataclass
class DecisionTrace:
    """Complete trace of a scheduling run."""

    run_id: str
    timestamp: datetime
    policy_name: str
    config: Dict[str, Any]
    step_features: List[StepFeatures]
    decisions: List[SchedulingDecision]
    summary_stats: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        """Convert trace to dictionary for JSON export."""
        return asdict(self)

    def to_human_readable(self) -> str:
        """Generate human-readable log format."""
        lines = [
            f"=== Scheduling Run: {self.run_id} ===",
            f"Policy: {self.policy_name}",
            f"Timestamp: {self.timestamp}",
            f"",
            "Configuration:",
        ]

        for key, value in self.config.items():
            lines.append(f"  {key}: {value}")

        lines.extend([
            "",
            "Step Features:",
        ])

        for sf in self.step_features:
            lines.append(f"  Step {sf.step_id} ({sf.recipe_id}):")
            lines.append(f"    Duration: {sf.duration} minutes ({sf.slot_count} slots)")
            lines.append(f"    Earliest: {sf.earliest_start}-{sf.earliest_finish} min")
            lines.append(f"    Needs cook: {sf.is_active}")
            lines.append(f"    Priority score: {sf.priority_score:.3f}")

        lines.extend([
            "",
            "Scheduling Decisions:",
        ])

        for decision in self.decisions:
            if decision.min_slot is None:
                lines.append(f"  {decision.step_id} -> unscheduled (anchor slot {decision.anchor_slot})")
            else:
                lines.append(
                    f"  {decision.step_id} -> slots {decision.min_slot}-{decision.max_slot}, "
                    f"instance {decision.appliance_instance}"
                )
            lines.append(f"    Reason: {decision.reason}")
            if decision.constraint_applied:
                lines.append(f"    Constraint: {decision.constraint_applied}")

        lines.extend([
            "",
            "Summary Statistics:",
        ])

        for key, value in self.summary_stats.items():
            lines.append(f"  {key}: {value}")

        lines.append("=" * 50)

        return "\n".join(lines)
