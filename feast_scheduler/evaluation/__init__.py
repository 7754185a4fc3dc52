"""Evaluation, validation and feast generation modules."""

from .generator import FeastGenerator
from .evaluator import Evaluator
from .validator import validate_schedule

__all__ = ['FeastGenerator', 'Evaluator', 'validate_schedule']
