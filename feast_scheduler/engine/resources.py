"""Slot-based tracking of appliance instances and cooks."""

import math
from typing import Dict, Set, Tuple

from ..models.recipe import (
    GRILL,
    PREPARATION,
    RESTING,
    STOVETOP,
    UNLIMITED_KINDS,
    KitchenConfig,
)

# Kinds that always need someone standing over them
ALWAYS_ACTIVE_KINDS = (STOVETOP, PREPARATION, GRILL)


def slots_needed(duration: int, slot_minutes: int) -> int:
    """Number of contiguous slots a duration occupies."""
    return math.ceil(duration / slot_minutes)


def is_active(kind: str, duration: int, threshold_minutes: int = 10) -> bool:
    """Whether a step occupies a cook for its whole duration."""
    if kind == RESTING:
        return False
    return kind in ALWAYS_ACTIVE_KINDS or duration < threshold_minutes


class ResourceAllocator:
    """Occupied-slot sets for each appliance instance and each cook.

    Slots count backwards from the target time: slot 0 is the last slot
    before serving.
    """

    def __init__(self, kitchen: KitchenConfig, active_threshold_minutes: int = 10):
        self.kitchen = kitchen
        self.active_threshold_minutes = active_threshold_minutes
        self._usage: Dict[str, Set[int]] = {}

    def occupied(self, resource_id: str) -> Set[int]:
        """Slots taken on a resource such as 'stovetop-1' or 'cook-2'."""
        return set(self._usage.get(resource_id, set()))

    def _is_free(self, resource_id: str, start_slot: int, slot_count: int) -> bool:
        used = self._usage.get(resource_id)
        if not used:
            return True
        return all(s not in used for s in range(start_slot, start_slot + slot_count))

    def _mark(self, resource_id: str, start_slot: int, slot_count: int) -> None:
        used = self._usage.setdefault(resource_id, set())
        span = set(range(start_slot, start_slot + slot_count))
        if used & span:
            raise ValueError(f"Resource {resource_id} already booked in slots {sorted(used & span)}")
        used |= span

    def _free_cook(self, start_slot: int, slot_count: int) -> int:
        for c in range(1, self.kitchen.cooks + 1):
            if self._is_free(f"cook-{c}", start_slot, slot_count):
                return c
        return 0

    def needs_cook(self, kind: str, duration: int) -> bool:
        return is_active(kind, duration, self.active_threshold_minutes)

    def is_available(
        self,
        kind: str,
        start_slot: int,
        slot_count: int,
        duration: int,
    ) -> Tuple[bool, int]:
        """Check a span for a step of the given kind.

        Returns (available, instance). Instance is the lowest free appliance
        instance, or 0 for kinds that use no appliance.
        """
        if self.needs_cook(kind, duration) and not self._free_cook(start_slot, slot_count):
            return False, -1

        if kind in UNLIMITED_KINDS:
            return True, 0

        for i in range(1, self.kitchen.capacity_for(kind) + 1):
            if self._is_free(f"{kind}-{i}", start_slot, slot_count):
                return True, i
        return False, -1

    def reserve(
        self,
        kind: str,
        instance: int,
        start_slot: int,
        slot_count: int,
        duration: int,
    ) -> int:
        """Book the appliance instance and, for active steps, a cook.

        Returns the cook index booked, 0 when none was needed.
        """
        cook = 0
        if self.needs_cook(kind, duration):
            cook = self._free_cook(start_slot, slot_count)
            if not cook:
                raise ValueError(f"No cook free in slots {start_slot}-{start_slot + slot_count - 1}")

        if kind not in UNLIMITED_KINDS:
            self._mark(f"{kind}-{instance}", start_slot, slot_count)
        if cook:
            self._mark(f"cook-{cook}", start_slot, slot_count)

        return cook
