"""Scheduling policy implementations."""

from .base import SchedulingPolicy
from .hot_priority import HotPriorityPolicy

__all__ = ['SchedulingPolicy', 'HotPriorityPolicy']
