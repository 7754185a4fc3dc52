"""Configuration management."""

import copy
import json
import yaml
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..models.recipe import KitchenConfig, Recipe
from .datetime_utils import parse_target_time


def _read_document(path: Path) -> Dict[str, Any]:
    with open(path, 'r') as f:
        if path.suffix.lower() in ['.yaml', '.yml']:
            return yaml.safe_load(f) or {}
        elif path.suffix.lower() == '.json':
            return json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")


def load_config(config_path: str) -> Dict[str, Any]:
    """Load configuration from YAML or JSON file, merged over the defaults."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    return merge_config(get_default_config(), _read_document(path))


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        'scheduling': {
            'slot_minutes': 5,
            'active_threshold_minutes': 10,
            'implicit_prep_minutes': 5,
        },
        'priority_weights': {
            'hot': 100,
            'high': 30,
            'medium': 20,
            'low': 10,
            'duration_divisor': 1000,
        },
        'kitchen': {
            'stoves': 4,
            'ovens': 1,
            'microwaves': 1,
            'air_fryers': 0,
            'pressure_cookers': 0,
            'rice_cookers': 0,
            'grills': 0,
            'other': 0,
            'cooks': 1,
        },
        'evaluation': {
            'feast_count': 20,
            'seed': 42,
            'max_recipes': 6,
            'max_steps': 5,
        },
    }


def load_feast(
    feast_path: str,
    config: Optional[Dict[str, Any]] = None,
) -> Tuple[List[Recipe], KitchenConfig, Optional[datetime]]:
    """Load recipes, kitchen and target time from a feast file.

    The kitchen section falls back to ``config['kitchen']`` and the target
    time is None when the file does not set one.
    """
    path = Path(feast_path)

    if not path.exists():
        raise FileNotFoundError(f"Feast file not found: {feast_path}")

    data = _read_document(path)
    config = config or get_default_config()

    recipes = [Recipe.from_dict(r) for r in data.get('recipes', [])]
    kitchen = KitchenConfig.from_dict(data.get('kitchen', config.get('kitchen')))

    target_time = None
    if data.get('target_time') is not None:
        target_time = parse_target_time(data['target_time'])

    return recipes, kitchen, target_time
