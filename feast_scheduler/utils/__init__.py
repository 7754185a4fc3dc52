"""Utility functions."""

from .config import load_config, load_feast
from .datetime_utils import parse_target_time, minutes_between

__all__ = ['load_config', 'load_feast', 'parse_target_time', 'minutes_between']
