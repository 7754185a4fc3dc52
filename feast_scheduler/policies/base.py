"""Base scheduling policy interface."""

from abc import ABC, abstractmethod
from typing import List

from ..engine.graph import StepNode


class SchedulingPolicy(ABC):
    """Abstract base class for ready-queue ordering policies."""

    def __init__(self, config: dict):
        """Initialize policy with configuration."""
        self.config = config

    @abstractmethod
    def priority_score(self, node: StepNode) -> float:
        """Score a step; higher scores are placed first."""
        pass

    def order_ready(self, ready: List[StepNode]) -> List[StepNode]:
        """Order ready steps by score, highest first, keeping queue order on ties."""
        return sorted(ready, key=lambda node: -self.priority_score(node))

    @abstractmethod
    def get_policy_name(self) -> str:
        """Return the name of this policy."""
        pass
