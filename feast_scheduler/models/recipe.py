"""Recipe, step and kitchen data models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

PREPARATION = 'preparation'
STOVETOP = 'stovetop'
OVEN = 'oven'
MICROWAVE = 'microwave'
RESTING = 'resting'
AIR_FRYER = 'air_fryer'
PRESSURE_COOKER = 'pressure_cooker'
RICE_COOKER = 'rice_cooker'
GRILL = 'grill'
OTHER = 'other'

APPLIANCE_KINDS = (
    PREPARATION,
    STOVETOP,
    OVEN,
    MICROWAVE,
    RESTING,
    AIR_FRYER,
    PRESSURE_COOKER,
    RICE_COOKER,
    GRILL,
    OTHER,
)

# Kinds that never occupy an appliance instance
UNLIMITED_KINDS = (PREPARATION, RESTING)

# Names used by the web app's saved feasts
APPLIANCE_ALIASES = {
    'prep': PREPARATION,
    'stove': STOVETOP,
    'rest': RESTING,
    'airfryer': AIR_FRYER,
    'pressurecooker': PRESSURE_COOKER,
    'ricecooker': RICE_COOKER,
    'bbq': GRILL,
}

SERVING_REQUIREMENTS = ('hot', 'cold')
HOT_PRIORITIES = ('high', 'medium', 'low')


def _required_id(data: Dict[str, Any], *keys: str) -> str:
    """First non-empty id found under keys, as a string."""
    for key in keys:
        value = data.get(key)
        if value is not None and str(value).strip():
            return str(value)
    raise ValueError(f"Missing id in entry: {data.get('name', data)!r}")


def normalize_appliance(name: str) -> str:
    """Map an appliance name or alias onto one of APPLIANCE_KINDS."""
    key = name.strip().lower().replace('-', '_')
    key = APPLIANCE_ALIASES.get(key, key)
    if key not in APPLIANCE_KINDS:
        raise ValueError(f"Unknown appliance kind: {name!r}")
    return key


@dataclass
class Step:
    """A single timed cooking step inside a recipe."""

    step_id: str
    recipe_id: str
    name: str
    appliance: str
    duration: int
    depends_on: List[str] = field(default_factory=list)
    temperature: Optional[int] = None
    temperature_unit: Optional[str] = None

    def __post_init__(self):
        """Normalize the appliance kind and check the duration."""
        self.appliance = normalize_appliance(self.appliance)
        if self.duration <= 0:
            raise ValueError(
                f"Step '{self.step_id}' must have a positive duration, got {self.duration}"
            )
        if self.temperature_unit is not None and self.temperature_unit not in ('F', 'C'):
            raise ValueError(f"Unsupported temperature unit: {self.temperature_unit}")
        self.depends_on = list(self.depends_on or [])

    @classmethod
    def from_dict(cls, data: Dict[str, Any], recipe_id: str) -> 'Step':
        """Build a step from a feast file entry."""
        return cls(
            step_id=_required_id(data, 'step_id', 'id'),
            recipe_id=str(data.get('recipe_id', data.get('recipeId', recipe_id))),
            name=data['name'],
            appliance=data['appliance'],
            duration=int(data['duration']),
            depends_on=[str(d) for d in data.get('depends_on', data.get('dependsOn')) or []],
            temperature=data.get('temperature'),
            temperature_unit=data.get('temperature_unit', data.get('temperatureUnit')),
        )


@dataclass
class Recipe:
    """A dish made of steps, served either hot or cold."""

    recipe_id: str
    name: str
    serving_requirement: str = 'hot'
    hot_priority: Optional[str] = None
    steps: List[Step] = field(default_factory=list)
    url: Optional[str] = None

    def __post_init__(self):
        if self.serving_requirement not in SERVING_REQUIREMENTS:
            raise ValueError(f"Unknown serving requirement: {self.serving_requirement}")
        if self.hot_priority is not None and self.hot_priority not in HOT_PRIORITIES:
            raise ValueError(f"Unknown hot priority: {self.hot_priority}")

    @property
    def is_hot(self) -> bool:
        return self.serving_requirement == 'hot'

    @property
    def effective_priority(self) -> Optional[str]:
        """Priority tier, which only applies to hot dishes."""
        return self.hot_priority if self.is_hot else None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Recipe':
        """Build a recipe (and its steps) from a feast file entry."""
        recipe_id = _required_id(data, 'recipe_id', 'id')
        return cls(
            recipe_id=recipe_id,
            name=data['name'],
            serving_requirement=data.get('serving_requirement', data.get('servingRequirement', 'hot')),
            hot_priority=data.get('hot_priority', data.get('hotPriority')),
            steps=[Step.from_dict(s, recipe_id) for s in data.get('steps', [])],
            url=data.get('url'),
        )


@dataclass
class KitchenConfig:
    """Appliance capacities and number of cooks available."""

    stoves: int = 4
    ovens: int = 1
    microwaves: int = 1
    air_fryers: int = 0
    pressure_cookers: int = 0
    rice_cookers: int = 0
    grills: int = 0
    other: int = 0
    cooks: int = 1

    _CAPACITY_FIELDS = {
        STOVETOP: 'stoves',
        OVEN: 'ovens',
        MICROWAVE: 'microwaves',
        AIR_FRYER: 'air_fryers',
        PRESSURE_COOKER: 'pressure_cookers',
        RICE_COOKER: 'rice_cookers',
        GRILL: 'grills',
        OTHER: 'other',
    }

    _KEY_ALIASES = {
        'airfryers': 'air_fryers',
        'pressurecookers': 'pressure_cookers',
        'ricecookers': 'rice_cookers',
        'bbqs': 'grills',
    }

    def __post_init__(self):
        for kind, attr in self._CAPACITY_FIELDS.items():
            if getattr(self, attr) < 0:
                raise ValueError(f"Capacity for {kind} cannot be negative")
        if self.cooks < 1:
            raise ValueError(f"At least one cook is required, got {self.cooks}")

    def capacity_for(self, kind: str) -> Optional[int]:
        """Number of instances of an appliance kind, None when unlimited."""
        kind = normalize_appliance(kind)
        if kind in UNLIMITED_KINDS:
            return None
        return getattr(self, self._CAPACITY_FIELDS[kind])

    def to_dict(self) -> Dict[str, int]:
        data = {attr: getattr(self, attr) for attr in self._CAPACITY_FIELDS.values()}
        data['cooks'] = self.cooks
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'KitchenConfig':
        """Build a kitchen from a config section, accepting legacy key names."""
        values = {}
        known = set(cls._CAPACITY_FIELDS.values()) | {'cooks'}
        for key, value in (data or {}).items():
            key = cls._KEY_ALIASES.get(key, key)
            if key not in known:
                raise ValueError(f"Unknown kitchen setting: {key}")
            values[key] = int(value)
        return cls(**values)
