"""Dependency graph over all steps of a feast."""

import logging
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Set, Tuple

from ..models.recipe import PREPARATION, Recipe, Step

logger = logging.getLogger(__name__)


class CyclicDependencyError(ValueError):
    """Raised when step dependencies form a cycle."""

    def __init__(self, stuck_steps: List[str]):
        self.stuck_steps = stuck_steps
        super().__init__(f"Step dependencies contain a cycle. Stuck steps: {stuck_steps}")


@dataclass
class StepNode:
    """A step tagged with its owning recipe's serving metadata."""

    step: Step
    recipe_id: str
    recipe_name: str
    is_hot: bool
    priority: Optional[str]

    @property
    def step_id(self) -> str:
        return self.step.step_id

    @property
    def duration(self) -> int:
        return self.step.duration

    @property
    def dependencies(self) -> List[str]:
        return self.step.depends_on


@dataclass
class DependencyGraph:
    """Flat node set plus successor index."""

    nodes: Dict[str, StepNode]
    successors: Dict[str, List[str]]
    dangling: List[Tuple[str, str]] = field(default_factory=list)

    def predecessors(self, step_id: str) -> List[str]:
        """Known predecessors of a step; dangling references are skipped."""
        return [d for d in self.nodes[step_id].dependencies if d in self.nodes]

    def sources(self) -> List[StepNode]:
        return [n for n in self.nodes.values() if not self.predecessors(n.step_id)]

    def sinks(self) -> List[StepNode]:
        return [n for n in self.nodes.values() if not self.successors[n.step_id]]

    def check_acyclic(self) -> List[str]:
        """Return a topological order of step ids, raising on a cycle."""
        indeg = {step_id: len(set(self.predecessors(step_id))) for step_id in self.nodes}
        q = deque(step_id for step_id, d in indeg.items() if d == 0)
        order = []

        while q:
            step_id = q.popleft()
            order.append(step_id)
            for child in self.successors[step_id]:
                indeg[child] -= 1
                if indeg[child] == 0:
                    q.append(child)

        if len(order) != len(self.nodes):
            raise CyclicDependencyError(sorted(s for s, d in indeg.items() if d > 0))

        return order


def add_implicit_prep(recipe: Recipe, prep_minutes: int, taken: Optional[Set[str]] = None) -> Recipe:
    """Give a recipe without any preparation step a leading prep step.

    Every step with no predecessor inside the recipe is made to depend on the
    new step. The new step id avoids the recipe's own ids and any in
    ``taken``. The recipe passed in is left untouched.
    """
    if prep_minutes <= 0 or not recipe.steps:
        return recipe
    if any(step.appliance == PREPARATION for step in recipe.steps):
        return recipe

    own_ids = {step.step_id for step in recipe.steps}
    taken = own_ids | set(taken or ())
    prep_id = f"{recipe.recipe_id}-prep"
    suffix = 2
    while prep_id in taken:
        prep_id = f"{recipe.recipe_id}-prep-{suffix}"
        suffix += 1

    prep = Step(
        step_id=prep_id,
        recipe_id=recipe.recipe_id,
        name=f"Prep {recipe.name}",
        appliance=PREPARATION,
        duration=prep_minutes,
    )
    steps = [prep]
    for step in recipe.steps:
        if any(d in own_ids for d in step.depends_on):
            steps.append(step)
        else:
            steps.append(replace(step, depends_on=[prep.step_id] + step.depends_on))

    return replace(recipe, steps=steps)


def build_graph(recipes: List[Recipe]) -> DependencyGraph:
    """Flatten all recipes' steps and index who depends on whom."""
    nodes: Dict[str, StepNode] = {}

    for recipe in recipes:
        for step in recipe.steps:
            if step.step_id in nodes:
                raise ValueError(f"Duplicate step id found: {step.step_id}")
            nodes[step.step_id] = StepNode(
                step=step,
                recipe_id=recipe.recipe_id,
                recipe_name=recipe.name,
                is_hot=recipe.is_hot,
                priority=recipe.effective_priority,
            )

    successors: Dict[str, List[str]] = {step_id: [] for step_id in nodes}
    dangling = []

    for node in nodes.values():
        for dep_id in node.dependencies:
            if dep_id not in nodes:
                dangling.append((node.step_id, dep_id))
                logger.warning("Step %s depends on unknown step %s", node.step_id, dep_id)
                continue
            if node.step_id not in successors[dep_id]:
                successors[dep_id].append(node.step_id)

    return DependencyGraph(nodes=nodes, successors=successors, dangling=dangling)


def compute_earliest_times(graph: DependencyGraph) -> Dict[str, Tuple[int, int]]:
    """Earliest start/finish offsets (minutes) by fixed-point relaxation.

    The graph must already be known to be acyclic.
    """
    earliest = {step_id: (0, node.duration) for step_id, node in graph.nodes.items()}

    changed = True
    while changed:
        changed = False
        for step_id, node in graph.nodes.items():
            start = max((earliest[d][1] for d in graph.predecessors(step_id)), default=0)
            if earliest[step_id][0] != start:
                earliest[step_id] = (start, start + node.duration)
                changed = True

    return earliest
