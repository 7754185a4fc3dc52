"""Hot-dish-first scheduling policy."""

from ..engine.graph import StepNode
from .base import SchedulingPolicy


class HotPriorityPolicy(SchedulingPolicy):
    """Places hot, high-priority dishes closest to serving time.

    Score is the hot bonus plus the tier bonus (hot dishes only), with a
    small duration term so longer steps win ties.
    """

    def __init__(self, config: dict):
        """Initialize policy weights."""
        super().__init__(config)
        self.weights = config.get('priority_weights', {
            'hot': 100,
            'high': 30,
            'medium': 20,
            'low': 10,
            'duration_divisor': 1000,
        })

    def priority_score(self, node: StepNode) -> float:
        score = 0.0
        if node.is_hot:
            score += self.weights.get('hot', 100)
            if node.priority:
                score += self.weights.get(node.priority, 0)
        score += node.duration / self.weights.get('duration_divisor', 1000)
        return score

    def get_policy_name(self) -> str:
        """Return policy name."""
        return "HOT-PRIORITY"
