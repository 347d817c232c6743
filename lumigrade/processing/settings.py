"""
Grade settings model for Lumigrade

Holds the twelve slider values that drive a render and the validation
rules applied to them before they reach the pixel math.
"""

import logging
import math
import sys
from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from lumigrade.exceptions import InvalidInputError

logger = logging.getLogger(__name__)


# Documented slider domains; everything not listed here is (-100, 100)
SETTING_RANGES: Dict[str, Tuple[float, float]] = {
    'exposure': (-100.0, 100.0),
    'contrast': (-100.0, 100.0),
    'shadows': (-100.0, 100.0),
    'highlights': (-100.0, 100.0),
    'whites': (-100.0, 100.0),
    'temp': (-100.0, 100.0),
    'tint': (-100.0, 100.0),
    'saturation': (-100.0, 100.0),
    'vibrance': (-100.0, 100.0),
    'sharpness': (0.0, 100.0),
    'clarity': (-100.0, 100.0),
    'vignette': (-100.0, 100.0),
}


@dataclass(frozen=True)
class GradeSettings:
    """
    Immutable set of grading parameters.

    All fields default to 0, which renders the source image unchanged.
    """
    # Light
    exposure: float = 0.0    # -100 to +100, 100 = one stop
    contrast: float = 0.0    # -100 to +100
    shadows: float = 0.0     # -100 to +100
    highlights: float = 0.0  # -100 to +100
    whites: float = 0.0      # -100 to +100

    # White balance
    temp: float = 0.0  # -100 (blue) to +100 (red)
    tint: float = 0.0  # -100 (magenta) to +100 (green)

    # Color
    saturation: float = 0.0  # -100 to +100
    vibrance: float = 0.0    # -100 to +100

    # Detail and effects
    sharpness: float = 0.0  # 0 to 100
    clarity: float = 0.0    # -100 to +100
    vignette: float = 0.0   # -100 (lighten edges) to +100 (darken edges)

    @classmethod
    def field_names(cls) -> List[str]:
        """Names of the grading fields in declaration order."""
        return [f.name for f in fields(cls)]

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'GradeSettings':
        """Build settings from an untrusted mapping, clamping out-of-range values."""
        settings, _ = sanitize_settings(data)
        return settings

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    def is_identity(self) -> bool:
        """True when every field is zero."""
        return all(value == 0 for value in self.to_dict().values())

    def merged(self, partial: Optional[Mapping[str, Any]]) -> 'GradeSettings':
        """Return a copy with the values from ``partial`` laid over this one."""
        if not partial:
            return self
        data = self.to_dict()
        data.update(partial)
        return GradeSettings.from_dict(data)

    def sanitized(self) -> 'GradeSettings':
        """
        Return a copy with every field finite and inside its domain.

        Raises:
            InvalidInputError: if a field is NaN or infinite
        """
        updates = {}
        for name, value in self.to_dict().items():
            number = _coerce_number(name, value)
            clamped = _clamp(name, number)
            if clamped != value:
                updates[name] = clamped
        return replace(self, **updates) if updates else self


def sanitize_settings(data: Optional[Mapping[str, Any]]
                      ) -> Tuple[GradeSettings, List[str]]:
    """
    Validate an untrusted settings mapping.

    Missing fields default to 0 and unknown keys are ignored. Numeric
    strings are accepted. Values outside their documented domain are
    clamped to the nearest bound rather than rejected.

    Args:
        data: Mapping of field name to value, or None for defaults

    Returns:
        Tuple of (settings, names of fields that had to be clamped)

    Raises:
        InvalidInputError: if a value is not a number or is not finite
    """
    if data is None:
        return GradeSettings(), []

    if not isinstance(data, Mapping):
        raise InvalidInputError(f"Settings must be a mapping, got {type(data).__name__}")

    known = set(SETTING_RANGES)
    unknown = [key for key in data if key not in known]
    if unknown:
        logger.debug(f"Ignoring unknown settings fields: {sorted(map(str, unknown))}")

    values = {}
    clamped_fields = []
    for name in GradeSettings.field_names():
        raw = data.get(name)
        if raw is None:
            values[name] = 0.0
            continue

        number = _coerce_number(name, raw)
        clamped = _clamp(name, number)
        if clamped != number:
            clamped_fields.append(name)
        values[name] = clamped

    return GradeSettings(**values), clamped_fields


def _coerce_number(name: str, raw: Any) -> float:
    """Convert a raw field value to a finite float."""
    # bool is an int subclass but never a meaningful slider value
    if isinstance(raw, bool):
        raise InvalidInputError(f"Setting '{name}' must be numeric, got bool")

    if isinstance(raw, str):
        try:
            number = float(raw.strip())
        except ValueError:
            raise InvalidInputError(f"Setting '{name}' is not numeric: {raw!r}")
    else:
        try:
            number = float(raw)
        except OverflowError:
            # Integers past the float range are still ordered; clamp them
            number = sys.float_info.max if raw > 0 else -sys.float_info.max
        except (TypeError, ValueError):
            raise InvalidInputError(
                f"Setting '{name}' must be numeric, got {type(raw).__name__}")

    if not math.isfinite(number):
        raise InvalidInputError(f"Setting '{name}' is not finite: {raw!r}")

    return number


def _clamp(name: str, value: float) -> float:
    low, high = SETTING_RANGES[name]
    if value < low or value > high:
        clamped = min(max(value, low), high)
        logger.warning(f"Setting '{name}'={value} outside [{low}, {high}], clamped to {clamped}")
        return clamped
    return value
