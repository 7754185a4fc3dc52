"""Feast generator for evaluation and demos."""

import random
from typing import List, Tuple

from ..models.recipe import (
    AIR_FRYER,
    GRILL,
    HOT_PRIORITIES,
    MICROWAVE,
    OVEN,
    PREPARATION,
    RESTING,
    RICE_COOKER,
    STOVETOP,
    KitchenConfig,
    Recipe,
    Step,
)


class FeastGenerator:
    """Generates deterministic recipe sets for evaluation."""

    def __init__(self, seed: int = 42, config: dict = None):
        """Initialize generator with seed for reproducibility."""
        self.seed = seed
        self.random = random.Random(seed)
        self.config = config or {}
        self.eval_config = self.config.get('evaluation', {})

    def sample_feast(self) -> Tuple[List[Recipe], KitchenConfig]:
        """A Thanksgiving dinner in a two-oven kitchen."""
        recipes = [
            Recipe('turkey', 'Roast Turkey', 'hot', 'high', steps=[
                Step('t1', 'turkey', 'Prep Turkey', PREPARATION, 30),
                Step('t2', 'turkey', 'Roast', OVEN, 180, ['t1'], temperature=325, temperature_unit='F'),
                Step('t3', 'turkey', 'Rest', RESTING, 30, ['t2']),
                Step('t4', 'turkey', 'Carve', PREPARATION, 15, ['t3']),
            ]),
            Recipe('potatoes', 'Mashed Potatoes', 'hot', 'medium', steps=[
                Step('p1', 'potatoes', 'Peel & Chop', PREPARATION, 20),
                Step('p2', 'potatoes', 'Boil', STOVETOP, 25, ['p1']),
                Step('p3', 'potatoes', 'Mash', PREPARATION, 10, ['p2']),
            ]),
            Recipe('gravy', 'Gravy', 'hot', 'high', steps=[
                Step('g1', 'gravy', 'Make Roux', STOVETOP, 10),
                Step('g2', 'gravy', 'Simmer', STOVETOP, 15, ['g1']),
            ]),
            Recipe('beans', 'Green Bean Casserole', 'hot', 'low', steps=[
                Step('b1', 'beans', 'Mix Ingredients', PREPARATION, 10),
                Step('b2', 'beans', 'Bake', OVEN, 30, ['b1']),
            ]),
        ]
        kitchen = KitchenConfig(
            stoves=4,
            ovens=2,
            microwaves=1,
            air_fryers=1,
            cooks=2,
        )
        return recipes, kitchen

    def generate_recipes(self, count: int, max_steps: int = None) -> List[Recipe]:
        """Generate recipes whose steps form chains with occasional branches."""
        max_steps = max_steps or self.eval_config.get('max_steps', 5)
        cooking_kinds = [STOVETOP, STOVETOP, OVEN, MICROWAVE, AIR_FRYER, RICE_COOKER, GRILL]
        recipes = []

        for i in range(count):
            recipe_id = f"recipe_{i:03d}"

            # Most dishes are served hot
            if self.random.random() < 0.8:
                serving, priority = 'hot', self.random.choice(HOT_PRIORITIES)
            else:
                serving, priority = 'cold', None

            steps: List[Step] = []
            for j in range(self.random.randint(1, max_steps)):
                step_id = f"{recipe_id}_s{j}"

                if j == 0 and self.random.random() < 0.5:
                    kind, duration = PREPARATION, self.random.randint(5, 30)
                elif self.random.random() < 0.1:
                    kind, duration = RESTING, self.random.randint(5, 20)
                else:
                    kind = self.random.choice(cooking_kinds)
                    duration = self.random.randint(2, 90 if kind == OVEN else 30)

                depends_on = []
                if steps:
                    depends_on = [steps[-1].step_id]
                    # Occasionally join an earlier step too
                    if len(steps) > 1 and self.random.random() < 0.2:
                        depends_on.append(steps[self.random.randint(0, len(steps) - 2)].step_id)

                steps.append(Step(step_id, recipe_id, f"Step {j}", kind, duration, depends_on))

            recipes.append(Recipe(recipe_id, f"Dish {i}", serving, priority, steps=steps))

        return recipes

    def generate_kitchen(self) -> KitchenConfig:
        """Generate a home kitchen with a random appliance mix."""
        return KitchenConfig(
            stoves=self.random.randint(2, 6),
            ovens=self.random.randint(1, 2),
            microwaves=self.random.randint(0, 1),
            air_fryers=self.random.randint(0, 1),
            rice_cookers=self.random.randint(0, 1),
            grills=self.random.randint(0, 1),
            cooks=self.random.randint(1, 3),
        )

    def generate_feasts(self, feast_count: int = None) -> List[Tuple[List[Recipe], KitchenConfig]]:
        """Generate a stream of feasts (recipes plus kitchen)."""
        feast_count = feast_count or self.eval_config.get('feast_count', 20)
        max_recipes = self.eval_config.get('max_recipes', 6)

        feasts = []
        for _ in range(feast_count):
            recipes = self.generate_recipes(self.random.randint(1, max_recipes))
            feasts.append((recipes, self.generate_kitchen()))

        return feasts
