"""Offline evaluation suite."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List

from ..engine.scheduler import Scheduler
from ..models.trace import DecisionTrace
from ..policies.hot_priority import HotPriorityPolicy
from .generator import FeastGenerator
from .validator import hot_finish_lag, validate_schedule

logger = logging.getLogger(__name__)


class EvaluationResult:
    """Aggregate results from scheduling a stream of feasts."""

    def __init__(self, policy_name: str):
        self.policy_name = policy_name
        self.feasts_total = 0
        self.feasts_valid = 0
        self.steps_total = 0
        self.steps_unschedulable = 0
        self.constraint_violations = 0
        self.elapsed_minutes: List[float] = []
        self.hot_lag_minutes: List[float] = []
        self.traces: List[DecisionTrace] = []

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON export."""
        valid_rate = (self.feasts_valid / self.feasts_total * 100) if self.feasts_total > 0 else 0
        mean_elapsed = sum(self.elapsed_minutes) / len(self.elapsed_minutes) if self.elapsed_minutes else 0.0
        mean_lag = sum(self.hot_lag_minutes) / len(self.hot_lag_minutes) if self.hot_lag_minutes else 0.0

        return {
            'policy': self.policy_name,
            'valid_rate_percent': valid_rate,
            'feasts_valid': self.feasts_valid,
            'feasts_total': self.feasts_total,
            'steps_total': self.steps_total,
            'steps_unschedulable': self.steps_unschedulable,
            'constraint_violations': self.constraint_violations,
            'mean_elapsed_minutes': mean_elapsed,
            'mean_hot_lag_minutes': mean_lag,
        }


class Evaluator:
    """Runs the scheduler over generated feasts and checks every plan."""

    def __init__(self, config: dict):
        """Initialize evaluator with configuration."""
        self.config = config
        self.eval_config = config.get('evaluation', {})
        self.generator = FeastGenerator(seed=self.eval_config.get('seed', 42), config=config)

    def evaluate(self, target_time: datetime, feast_count: int = None) -> EvaluationResult:
        """Schedule each generated feast for target_time and collect metrics."""
        scheduler = Scheduler(HotPriorityPolicy(self.config), self.config)
        result = EvaluationResult(scheduler.policy.get_policy_name())

        for recipes, kitchen in self.generator.generate_feasts(feast_count):
            schedule, trace = scheduler.schedule(recipes, kitchen, target_time)
            result.traces.append(trace)
            result.feasts_total += 1

            violations = validate_schedule(schedule, kitchen, self.config)
            for violation in violations:
                logger.error("Schedule %s violates a constraint: %s", schedule.schedule_id, violation)

            if schedule.is_valid and not violations:
                result.feasts_valid += 1
            result.steps_total += trace.summary_stats['steps_total']
            result.steps_unschedulable += len(schedule.unschedulable)
            result.constraint_violations += len(violations)
            result.elapsed_minutes.append(schedule.total_elapsed_time)
            result.hot_lag_minutes.extend(hot_finish_lag(schedule).values())

        return result

    def run_evaluation(
        self,
        output_dir: str = "results",
        target_time: datetime = None,
        feast_count: int = None,
    ) -> EvaluationResult:
        """Run full evaluation suite and export the results."""
        if target_time is None:
            target_time = datetime.now().replace(hour=18, minute=0, second=0, microsecond=0)

        result = self.evaluate(target_time, feast_count)

        output_path = Path(output_dir)
        output_path.mkdir(exist_ok=True)

        with open(output_path / 'evaluation_results.json', 'w') as f:
            json.dump(result.to_dict(), f, indent=2, default=str)

        for trace in result.traces:
            trace_path = output_path / f"trace_{trace.policy_name.lower()}_{trace.run_id}.json"
            with open(trace_path, 'w') as f:
                json.dump(trace.to_dict(), f, indent=2, default=str)

        self._print_summary(result)

        return result

    def _print_summary(self, result: EvaluationResult):
        """Print evaluation report."""
        data = result.to_dict()

        print("\n" + "=" * 70)
        print(f"EVALUATION RESULTS ({result.policy_name})")
        print("=" * 70)
        print(f"{'Metric':<40} {'Value':<15}")
        print("-" * 70)
        print(f"{'Valid schedules (%)':<40} {data['valid_rate_percent']:<15.2f}")
        print(f"{'Feasts':<40} {data['feasts_total']:<15}")
        print(f"{'Steps':<40} {data['steps_total']:<15}")
        print(f"{'Unschedulable steps':<40} {data['steps_unschedulable']:<15}")
        print(f"{'Constraint violations':<40} {data['constraint_violations']:<15}")
        print(f"{'Mean total time (minutes)':<40} {data['mean_elapsed_minutes']:<15.1f}")
        print(f"{'Mean hot-dish lag (minutes)':<40} {data['mean_hot_lag_minutes']:<15.1f}")
        print("\n" + "=" * 70)
