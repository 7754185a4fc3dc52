from datetime import datetime, timedelta

import pytest

from feast_scheduler.engine.graph import CyclicDependencyError
from feast_scheduler.engine.scheduler import Scheduler, generate_schedule
from feast_scheduler.evaluation.generator import FeastGenerator
from feast_scheduler.evaluation.validator import validate_schedule
from feast_scheduler.models.recipe import KitchenConfig
from feast_scheduler.policies.hot_priority import HotPriorityPolicy


def _placements(schedule):
    return [(t.step_id, t.appliance_instance, t.start_time, t.end_time) for t in schedule.tasks]


def test_single_step_recipe_gets_prep_and_ends_at_target(pasta, target_time):
    kitchen = KitchenConfig(stoves=4, ovens=1, microwaves=1, cooks=2)
    schedule = generate_schedule([pasta], kitchen, target_time)

    assert len(schedule.tasks) == 2
    boil = schedule.task_for('s1')
    prep = next(t for t in schedule.tasks if 'Prep' in t.step_name)

    assert boil.start_time == datetime(2023, 11, 23, 17, 45)
    assert boil.end_time == target_time
    assert boil.appliance_instance == 1
    assert prep.end_time <= boil.start_time
    assert prep.appliance_instance == 0
    assert schedule.total_elapsed_time == 20
    assert schedule.is_valid


def test_dependencies_finish_before_dependents(make_recipe, roomy_kitchen, target_time):
    stew = make_recipe('stew', [
        ('chop', 'preparation', 15, []),
        ('brown', 'stovetop', 10, ['chop']),
        ('braise', 'oven', 90, ['brown']),
        ('rest', 'resting', 10, ['braise']),
    ])
    rice = make_recipe('rice', [
        ('rinse', 'preparation', 5, []),
        ('cook', 'rice_cooker', 25, ['rinse']),
    ], priority='low')
    kitchen = KitchenConfig(stoves=2, ovens=1, rice_cookers=1, cooks=1)
    schedule = generate_schedule([stew, rice], kitchen, target_time)

    assert schedule.is_valid
    for task in schedule.tasks:
        for dep_id in task.dependencies:
            assert schedule.task_for(dep_id).end_time <= task.start_time


def test_single_stove_never_runs_two_steps_at_once(make_recipe, target_time):
    a = make_recipe('sauce', [('reduce', 'stovetop', 10, [])])
    b = make_recipe('greens', [('saute', 'stovetop', 10, [])])
    kitchen = KitchenConfig(stoves=1, cooks=2)
    schedule = generate_schedule([a, b], kitchen, target_time)

    first, second = schedule.task_for('reduce'), schedule.task_for('saute')
    assert first.appliance_instance == second.appliance_instance == 1
    assert first.end_time <= second.start_time or second.end_time <= first.start_time
    # First in queue order takes the slot closest to serving
    assert first.end_time == target_time
    assert second.end_time == target_time - timedelta(minutes=10)


def test_cooks_limit_active_steps(make_recipe, target_time):
    a = make_recipe('sauce', [('reduce', 'stovetop', 10, [])])
    b = make_recipe('greens', [('saute', 'stovetop', 10, [])])
    kitchen = KitchenConfig(stoves=4, cooks=1)
    schedule = generate_schedule([a, b], kitchen, target_time)

    assert schedule.is_valid
    assert validate_schedule(schedule, kitchen) == []
    first, second = schedule.task_for('reduce'), schedule.task_for('saute')
    assert first.end_time <= second.start_time or second.end_time <= first.start_time


def test_hot_high_priority_placed_closest_to_serving(make_recipe, target_time):
    salad = make_recipe('salad', [('toss', 'preparation', 10, [])], serving='cold')
    soup = make_recipe('soup', [('blend', 'preparation', 10, [])], priority='high')
    kitchen = KitchenConfig(cooks=1)
    schedule = generate_schedule([salad, soup], kitchen, target_time)

    assert schedule.task_for('blend').end_time == target_time
    assert schedule.task_for('toss').end_time <= schedule.task_for('blend').start_time


def test_uncontended_oven_sink_ends_at_target(make_recipe, target_time):
    roast = make_recipe('roast', [('bake', 'oven', 60, [])])
    schedule = generate_schedule([roast], KitchenConfig(ovens=1, cooks=1), target_time)

    bake = schedule.task_for('bake')
    assert bake.end_time == target_time
    assert bake.start_time == target_time - timedelta(minutes=60)


def test_zero_capacity_step_reported_unschedulable(make_recipe, target_time):
    kebabs = make_recipe('kebabs', [
        ('skewer', 'preparation', 15, []),
        ('grill', 'grill', 20, ['skewer']),
    ])
    schedule = generate_schedule([kebabs], KitchenConfig(grills=0, cooks=1), target_time)

    assert all(t.appliance != 'grill' for t in schedule.tasks)
    assert [u.step_id for u in schedule.unschedulable] == ['grill']
    assert schedule.unschedulable[0].reason == "No grill available in kitchen"
    assert schedule.is_valid is False
    assert len(schedule.validation_errors) == 1
    # Upstream steps are still planned
    assert schedule.task_for('skewer') is not None


def test_dangling_dependency_is_a_warning(make_recipe, target_time):
    soup = make_recipe('soup', [('simmer', 'stovetop', 20, ['stock'])])
    schedule = generate_schedule([soup], KitchenConfig(cooks=1), target_time)

    assert schedule.is_valid
    assert len(schedule.warnings) == 1
    assert "stock" in schedule.warnings[0]
    assert schedule.task_for('simmer').end_time == target_time


def test_cycle_fails_fast(make_recipe, target_time):
    recipe = make_recipe('loop', [
        ('a', 'stovetop', 10, ['b']),
        ('b', 'stovetop', 10, ['a']),
    ])
    with pytest.raises(CyclicDependencyError):
        generate_schedule([recipe], KitchenConfig(cooks=1), target_time)


def test_scheduling_is_deterministic(target_time):
    recipes, kitchen = FeastGenerator().sample_feast()
    first = generate_schedule(recipes, kitchen, target_time)
    second = generate_schedule(recipes, kitchen, target_time)

    assert _placements(first) == _placements(second)


def test_sample_feast_satisfies_all_constraints(target_time, config):
    recipes, kitchen = FeastGenerator().sample_feast()
    schedule = generate_schedule(recipes, kitchen, target_time, config)

    assert schedule.is_valid
    assert validate_schedule(schedule, kitchen, config) == []
    assert schedule.task_for('t4').end_time == target_time
    assert schedule.task_for('g2').end_time == target_time
    # Gravy has no prep step of its own
    assert schedule.task_for('gravy-prep') is not None
    assert schedule.total_elapsed_time >= 255


def test_empty_feast(target_time):
    schedule = generate_schedule([], KitchenConfig(), target_time)
    assert schedule.tasks == []
    assert schedule.total_elapsed_time == 0
    assert schedule.is_valid


def test_trace_records_contention(make_recipe, target_time, config):
    a = make_recipe('sauce', [('reduce', 'stovetop', 10, [])])
    b = make_recipe('greens', [('saute', 'stovetop', 10, [])])
    scheduler = Scheduler(HotPriorityPolicy(config), config)
    schedule, trace = scheduler.schedule([a, b], KitchenConfig(stoves=1, cooks=2), target_time)

    decisions = {d.step_id: d for d in trace.decisions}
    assert decisions['reduce'].constraint_applied is None
    assert decisions['saute'].constraint_applied == "resource_contention"
    assert decisions['saute'].min_slot == 2
    assert trace.summary_stats['steps_total'] == 4
    assert trace.summary_stats['steps_scheduled'] == 4
    assert trace.summary_stats['steps_delayed'] >= 1
    assert trace.run_id == schedule.schedule_id
    assert "Scheduling Decisions:" in trace.to_human_readable()


def test_slot_width_is_configurable(pasta, target_time, config):
    config['scheduling']['slot_minutes'] = 10
    schedule = generate_schedule([pasta], KitchenConfig(cooks=1), target_time, config)

    boil = schedule.task_for('s1')
    assert boil.start_time == target_time - timedelta(minutes=20)


def test_predecessors_of_unschedulable_step_finish_before_its_dependents(make_recipe, target_time):
    roast = make_recipe('roast', [
        ('marinate', 'preparation', 10, []),
        ('sear', 'grill', 20, ['marinate']),
        ('roast', 'oven', 30, ['sear']),
    ])
    schedule = generate_schedule([roast], KitchenConfig(ovens=1, grills=0, cooks=1), target_time)

    marinate = schedule.task_for('marinate')
    roast_task = schedule.task_for('roast')
    assert roast_task.end_time == target_time
    assert roast_task.start_time == datetime(2023, 11, 23, 17, 30)
    # The grill step's 20 minutes are still held between the two
    assert marinate.end_time <= roast_task.start_time - timedelta(minutes=20)
    assert [u.step_id for u in schedule.unschedulable] == ['sear']
    assert schedule.is_valid is False


def test_user_step_named_like_implicit_prep(make_recipe, target_time):
    soup = make_recipe('soup', [
        ('soup-prep', 'stovetop', 10, []),
        ('simmer', 'stovetop', 20, ['soup-prep']),
    ])
    stew = make_recipe('stew', [('soup-prep-2', 'oven', 60, [])])

    schedule = generate_schedule([soup, stew], KitchenConfig(cooks=2), target_time)

    ids = {t.step_id for t in schedule.tasks}
    assert {'soup-prep', 'simmer', 'soup-prep-2', 'stew-prep'} <= ids
    assert len(ids) == len(schedule.tasks) == 5
    assert schedule.task_for('soup-prep-3') is not None
    assert schedule.is_valid
