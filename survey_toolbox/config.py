"""
Config Module
-------------
Default processing parameters and JSON config loading.
Every component takes a plain dict; this module only supplies the defaults.
"""
import copy
import json
from typing import Any, Dict, Optional

DEFAULT_CONFIG: Dict[str, Any] = {
    'id_field': 'participant_id',
    'delimiter': ',',
    'on_missing': 'propagate',   # or 'raise'
    'exclude_incomplete': False,
    'output_suffix': '_scored',
}


def load_config(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Returns DEFAULT_CONFIG overlaid with the JSON file at `path` and then `overrides`.

    Example file:
        {
          "fields": ["participant_id", "Q1", "Q2"],
          "exclude_ids": [35],
          "rename": {"lowercase": true, "prefix_substitutions": {"q": "dass_"}},
          "groups": {"depression": {"items": [3, 5, 10], "item_template": "dass_{}"}}
        }
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if path is not None:
        with open(path, 'r', encoding='utf-8') as f:
            loaded = json.load(f)
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file {path} must contain a JSON object, got {type(loaded).__name__}.")
        config.update(loaded)
    if overrides:
        config.update(overrides)
    return config
