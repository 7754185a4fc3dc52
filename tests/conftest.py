from datetime import datetime

import pytest

from feast_scheduler.models.recipe import KitchenConfig, Recipe, Step
from feast_scheduler.utils.config import get_default_config


@pytest.fixture
def target_time():
    return datetime(2023, 11, 23, 18, 0)


@pytest.fixture
def config():
    return get_default_config()


@pytest.fixture
def make_recipe():
    """Build a recipe from (step_id, appliance, duration, depends_on) tuples."""
    def _make(recipe_id, steps, serving='hot', priority='high', name=None):
        return Recipe(
            recipe_id=recipe_id,
            name=name or recipe_id.title(),
            serving_requirement=serving,
            hot_priority=priority if serving == 'hot' else None,
            steps=[
                Step(step_id, recipe_id, step_id.replace('_', ' ').title(), appliance, duration, list(deps))
                for step_id, appliance, duration, deps in steps
            ],
        )
    return _make


@pytest.fixture
def pasta():
    return Recipe(
        recipe_id='r1',
        name='Pasta',
        serving_requirement='hot',
        hot_priority='high',
        steps=[Step('s1', 'r1', 'Boil Water', 'stovetop', 15)],
    )


@pytest.fixture
def roomy_kitchen():
    return KitchenConfig(stoves=4, ovens=2, microwaves=1, air_fryers=1, grills=1, cooks=2)
