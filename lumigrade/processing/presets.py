"""
Preset looks for Lumigrade

Each preset is a partial set of slider values laid over the defaults.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .settings import GradeSettings, sanitize_settings

logger = logging.getLogger(__name__)

RESET_KEY = "reset"


@dataclass(frozen=True)
class Preset:
    """A named partial-settings look"""
    key: str
    name: str
    color: str  # Swatch color for pickers, "#RRGGBB"
    settings: Dict[str, float] = field(default_factory=dict)

    def to_settings(self) -> GradeSettings:
        """Merge this preset over the default settings."""
        return GradeSettings().merged(self.settings)


class PresetCatalog:
    """
    Built-in looks plus any registered from configuration.

    The built-in values are tuned for 8-bit JPEG sources.
    """

    BUILTIN_PRESETS = {
        'natgeo': Preset(
            key='natgeo', name='Nat Geo', color='#8BC34A',
            settings={'contrast': 15, 'shadows': 20, 'highlights': -30, 'clarity': 20,
                      'saturation': 10, 'vibrance': 15, 'temp': 10},
        ),
        'sony': Preset(
            key='sony', name='Sony Award', color='#2196F3',
            settings={'exposure': 5, 'contrast': 20, 'highlights': -50, 'shadows': 30,
                      'whites': 10, 'clarity': 10, 'sharpness': 30, 'temp': -10},
        ),
        'cinematic': Preset(
            key='cinematic', name='Cinematic', color='#9C27B0',
            settings={'contrast': 25, 'shadows': -20, 'highlights': -10, 'saturation': -15,
                      'temp': -20, 'tint': 10, 'vignette': 60, 'clarity': 30},
        ),
        'clean': Preset(
            key='clean', name='Clean Pro', color='#FFFFFF',
            settings={'exposure': 0, 'contrast': 5, 'shadows': 10, 'highlights': -10,
                      'clarity': 10, 'sharpness': 10},
        ),
        'hdr': Preset(
            key='hdr', name='HDR+ Pro', color='#FF9800',
            settings={'highlights': -40, 'shadows': 40, 'whites': 10, 'contrast': 15,
                      'clarity': 25, 'vibrance': 15, 'sharpness': 10},
        ),
        'drone': Preset(
            key='drone', name='Drone/Dehaze', color='#00BCD4',
            settings={'contrast': 30, 'clarity': 45, 'saturation': 20, 'vibrance': 40,
                      'highlights': -15, 'shadows': 10, 'sharpness': 25},
        ),
        'automotive': Preset(
            key='automotive', name='Automotive', color='#607D8B',
            settings={'clarity': 35, 'contrast': 15, 'sharpness': 40, 'highlights': -25,
                      'exposure': 5, 'temp': -5},
        ),
        'moon': Preset(
            key='moon', name='Moon/Stars', color='#3F51B5',
            settings={'exposure': 10, 'contrast': 40, 'shadows': -60, 'highlights': -40,
                      'clarity': 50, 'sharpness': 60, 'temp': -10},
        ),
        'night': Preset(
            key='night', name='Night Mode', color='#673AB7',
            settings={'exposure': 20, 'shadows': 50, 'highlights': -15, 'contrast': 10,
                      'clarity': 15, 'saturation': 10, 'temp': -5, 'tint': 5},
        ),
        'selfie': Preset(
            key='selfie', name='Selfie/Portrait', color='#E91E63',
            settings={'exposure': 5, 'contrast': -10, 'shadows': 15, 'highlights': -15,
                      'clarity': -35, 'sharpness': 20, 'saturation': -5, 'vignette': 30},
        ),
    }

    def __init__(self, extra_presets: Optional[Mapping[str, Mapping[str, Any]]] = None):
        """
        Initialize the catalog

        Args:
            extra_presets: Config-style mapping of key -> {name, color, settings}
        """
        self._presets: Dict[str, Preset] = dict(self.BUILTIN_PRESETS)
        for key, data in (extra_presets or {}).items():
            self.register(self._preset_from_config(key, data))

    @staticmethod
    def _preset_from_config(key: str, data: Mapping[str, Any]) -> Preset:
        if not isinstance(data, Mapping):
            raise ValueError(f"Preset '{key}' must be a mapping")
        partial = data.get('settings') or {}
        # Validate now so a bad config fails at load, not at render
        sanitize_settings(partial)
        return Preset(
            key=key,
            name=str(data.get('name', key)),
            color=str(data.get('color', '#FFFFFF')),
            settings={name: value for name, value in partial.items()},
        )

    def register(self, preset: Preset) -> None:
        if preset.key == RESET_KEY:
            raise ValueError(f"'{RESET_KEY}' is reserved")
        if preset.key in self._presets:
            logger.info(f"Overriding preset '{preset.key}'")
        self._presets[preset.key] = preset

    def get(self, key: str) -> Preset:
        try:
            return self._presets[key]
        except KeyError:
            raise ValueError(f"Unknown preset: {key}. Valid presets: {self.keys()}")

    def keys(self) -> List[str]:
        return list(self._presets) + [RESET_KEY]

    def list(self) -> List[Preset]:
        return list(self._presets.values())

    def apply(self, key: str) -> GradeSettings:
        """Settings for a preset; ``reset`` returns the defaults."""
        if key == RESET_KEY:
            return GradeSettings()
        return self.get(key).to_settings()


_default_catalog = PresetCatalog()


def get_preset(key: str) -> Preset:
    """Look up a built-in preset."""
    return _default_catalog.get(key)


def list_presets() -> List[Preset]:
    return _default_catalog.list()


def apply_preset(key: str) -> GradeSettings:
    """Built-in preset merged over default settings."""
    return _default_catalog.apply(key)
