"""
Estimator settings.
Loads tunables from the packaged pointwise.yaml with environment-variable overrides and named presets.
"""
import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# filename used for the YAML configuration
CONFIG_FILENAME = 'pointwise.yaml'

QUICK_WIN_RULES = ('literal', 'urgent_high')

# environment variable -> settings field; these win over the YAML file
ENV_OVERRIDES = {
    'POINTWISE_LOOKBACK_DAYS': 'lookback_days',
    'POINTWISE_HOURS_PER_DAY': 'hours_per_day',
    'POINTWISE_QUICK_WIN_RULE': 'quick_win_rule',
}


@dataclass(frozen=True)
class Settings:
    lookback_days: int = 30
    team_lookback_days: int = 30
    hours_per_day: float = 8.0
    recommended_limit: int = 5
    quick_win_limit: int = 3
    quick_win_max_points: int = 3
    # 'literal' keeps priority >= 2; 'urgent_high' uses priority <= 2
    quick_win_rule: str = 'literal'
    similar_issue_limit: int = 5
    similarity_threshold: float = 0.3
    insight_examples: int = 3

    def as_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_SETTINGS = Settings()


def default_config_path() -> str:
    return os.getenv('POINTWISE_CONFIG') or os.path.join(os.path.dirname(__file__), CONFIG_FILENAME)


def _read_yaml(path: str) -> Dict[str, Any]:
    with open(path, 'r', encoding='utf-8') as f:
        doc = yaml.safe_load(f) or {}
    if not isinstance(doc, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level")
    return doc


def _coerce(name: str, value: Any) -> Any:
    default = getattr(DEFAULT_SETTINGS, name)
    try:
        if isinstance(default, int):
            coerced = int(value)
        elif isinstance(default, float):
            coerced = float(value)
        else:
            coerced = str(value).strip().lower()
    except (TypeError, ValueError):
        raise ValueError(f"Invalid value for setting '{name}': {value!r}")
    if name == 'quick_win_rule' and coerced not in QUICK_WIN_RULES:
        raise ValueError(f"Invalid quick_win_rule {value!r}; expected one of: {', '.join(QUICK_WIN_RULES)}")
    return coerced


def settings_from_mapping(data: Dict[str, Any], base: Settings = DEFAULT_SETTINGS) -> Settings:
    """
    Build Settings from a mapping, starting from `base`.
    Unknown keys are ignored; values are coerced to the type of the default.
    """
    known = {f.name for f in fields(Settings)}
    updates = {k: _coerce(k, v) for k, v in (data or {}).items() if k in known and v is not None}
    return replace(base, **updates)


def _apply_env(settings: Settings) -> Settings:
    overrides = {field_name: os.environ[var] for var, field_name in ENV_OVERRIDES.items() if os.environ.get(var)}
    if not overrides:
        return settings
    logger.debug("Applying environment overrides: %s", sorted(overrides))
    return settings_from_mapping(overrides, base=settings)


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Load settings from a YAML file if it exists, otherwise defaults; environment overrides are applied last.
    """
    path = path or default_config_path()
    settings = DEFAULT_SETTINGS
    if os.path.exists(path):
        doc = _read_yaml(path)
        settings = settings_from_mapping({k: v for k, v in doc.items() if k != 'presets'})
    else:
        logger.debug("No config file at %s; using defaults", path)
    return _apply_env(settings)


def load_preset(preset_name: str, path: Optional[str] = None) -> Settings:
    """
    Load the base settings and merge the named preset over them.

    Raises ValueError if the config file or the preset is missing.

    Example:
        settings = load_preset('corrected_quick_wins')
    """
    path = path or default_config_path()
    if not os.path.exists(path):
        raise ValueError(f"Config file not found at: {path}")
    doc = _read_yaml(path)
    presets = doc.get('presets') or {}
    if not isinstance(presets, dict) or preset_name not in presets:
        raise ValueError(f"Preset '{preset_name}' not found in {path}")
    base = settings_from_mapping({k: v for k, v in doc.items() if k != 'presets'})
    merged = settings_from_mapping(presets.get(preset_name) or {}, base=base)
    return _apply_env(merged)


def list_presets(path: Optional[str] = None) -> List[str]:
    """Return a list of available preset names from the config YAML (or empty list)."""
    path = path or default_config_path()
    if not os.path.exists(path):
        return []
    presets = _read_yaml(path).get('presets')
    return list(presets.keys()) if isinstance(presets, dict) else []
