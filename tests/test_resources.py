import pytest

from feast_scheduler.engine.resources import ResourceAllocator, is_active, slots_needed
from feast_scheduler.models.recipe import KitchenConfig


@pytest.mark.parametrize("duration,expected", [(5, 1), (7, 2), (15, 3), (180, 36)])
def test_slots_needed(duration, expected):
    assert slots_needed(duration, 5) == expected


@pytest.mark.parametrize("kind,duration,expected", [
    ('stovetop', 60, True),
    ('preparation', 30, True),
    ('grill', 45, True),
    ('oven', 9, True),
    ('microwave', 3, True),
    ('oven', 10, False),
    ('rice_cooker', 40, False),
    ('resting', 5, False),
    ('resting', 30, False),
])
def test_active_classification(kind, duration, expected):
    assert is_active(kind, duration) is expected


def test_lowest_free_instance_is_used():
    allocator = ResourceAllocator(KitchenConfig(stoves=2, cooks=2))

    assert allocator.is_available('stovetop', 0, 2, 10) == (True, 1)
    assert allocator.reserve('stovetop', 1, 0, 2, 10) == 1
    assert allocator.is_available('stovetop', 0, 2, 10) == (True, 2)
    assert allocator.reserve('stovetop', 2, 0, 2, 10) == 2

    assert allocator.is_available('stovetop', 1, 2, 10) == (False, -1)
    assert allocator.is_available('stovetop', 2, 2, 10) == (True, 1)
    assert allocator.occupied('stovetop-1') == {0, 1}
    assert allocator.occupied('cook-2') == {0, 1}


def test_busy_cooks_block_active_steps_only():
    allocator = ResourceAllocator(KitchenConfig(stoves=4, ovens=1, microwaves=1, cooks=1))
    allocator.reserve('stovetop', 1, 0, 4, 20)

    # A second burner is free but nobody can watch it
    assert allocator.is_available('stovetop', 0, 2, 10) == (False, -1)
    assert allocator.is_available('microwave', 1, 1, 3) == (False, -1)
    # A long bake runs unattended
    assert allocator.is_available('oven', 0, 12, 60) == (True, 1)


def test_preparation_needs_a_cook_but_no_appliance():
    allocator = ResourceAllocator(KitchenConfig(cooks=1))

    assert allocator.is_available('preparation', 0, 2, 10) == (True, 0)
    assert allocator.reserve('preparation', 0, 0, 2, 10) == 1
    assert allocator.is_available('preparation', 1, 1, 5) == (False, -1)
    assert allocator.occupied('cook-1') == {0, 1}


def test_resting_consumes_nothing():
    allocator = ResourceAllocator(KitchenConfig(cooks=1))
    allocator.reserve('preparation', 0, 0, 6, 30)

    assert allocator.is_available('resting', 0, 6, 30) == (True, 0)
    assert allocator.reserve('resting', 0, 0, 6, 30) == 0
    assert allocator.occupied('cook-1') == set(range(6))


def test_zero_capacity_is_never_available():
    allocator = ResourceAllocator(KitchenConfig(grills=0, cooks=2))
    for slot in range(10):
        assert allocator.is_available('grill', slot, 2, 10) == (False, -1)


def test_double_booking_raises():
    allocator = ResourceAllocator(KitchenConfig(ovens=1, cooks=1))
    allocator.reserve('oven', 1, 0, 12, 60)
    with pytest.raises(ValueError, match="already booked"):
        allocator.reserve('oven', 1, 10, 4, 20)


def test_active_threshold_is_configurable():
    allocator = ResourceAllocator(KitchenConfig(ovens=1, cooks=1), active_threshold_minutes=20)
    assert allocator.needs_cook('oven', 15) is True
    assert allocator.needs_cook('oven', 20) is False
