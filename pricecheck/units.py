# pricecheck/units.py
"""
Quantity normalization.

Every quantity is expressed in a base unit before prices are compared:
mass in grams, volume in milliliters, count in pieces.
"""
import logging
from enum import Enum
from typing import Dict, Tuple, Union

from .errors import InvalidUnit

logger = logging.getLogger(__name__)


class Unit(str, Enum):
    G = "g"
    KG = "kg"
    ML = "ml"
    L = "L"
    PCS = "pcs"


class UnitFamily(str, Enum):
    MASS = "mass"
    VOLUME = "volume"
    COUNT = "count"
    UNKNOWN = "unknown"


# lowercased unit -> (family, factor to base unit)
CONVERSIONS: Dict[str, Tuple[UnitFamily, float]] = {
    "g": (UnitFamily.MASS, 1.0),
    "kg": (UnitFamily.MASS, 1000.0),
    "ml": (UnitFamily.VOLUME, 1.0),
    "l": (UnitFamily.VOLUME, 1000.0),
    "pcs": (UnitFamily.COUNT, 1.0),
}

BASE_UNITS: Dict[UnitFamily, str] = {
    UnitFamily.MASS: "g",
    UnitFamily.VOLUME: "ml",
    UnitFamily.COUNT: "pcs",
    UnitFamily.UNKNOWN: "unit",
}

UnitLike = Union[Unit, str]


def _key(unit: UnitLike) -> str:
    value = unit.value if isinstance(unit, Unit) else str(unit)
    return value.strip().lower()


def scale_factor(unit: UnitLike) -> float:
    entry = CONVERSIONS.get(_key(unit))
    if entry is None:
        # unknown units compare as-is
        logger.debug("unrecognized unit %r, using scale 1", unit)
        return 1.0
    return entry[1]


def unit_family(unit: UnitLike) -> UnitFamily:
    entry = CONVERSIONS.get(_key(unit))
    return entry[0] if entry else UnitFamily.UNKNOWN


def base_unit(unit: UnitLike) -> str:
    return BASE_UNITS[unit_family(unit)]


def normalize(quantity: float, unit: UnitLike) -> float:
    """Return ``quantity`` expressed in the base unit of ``unit``'s family."""
    return quantity * scale_factor(unit)


def parse_unit(raw) -> Unit:
    """
    Match raw user input against the supported units, ignoring case.
    Raises InvalidUnit for anything else.
    """
    if isinstance(raw, Unit):
        return raw
    if raw is None:
        raise InvalidUnit("unit is required")
    key = str(raw).strip().lower()
    for unit in Unit:
        if unit.value.lower() == key:
            return unit
    raise InvalidUnit(f"unsupported unit: {raw!r}")
