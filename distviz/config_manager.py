"""
Configuration management for the chart gallery.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG: Dict[str, Any] = {
    'output_dir': 'charts',
    'format': 'png',
    'dpi': 100,
    'figure_size': [8, 5],
    'style': 'whitegrid',
    'histogram': {
        'bin_width': 2.0,
        'out_of_range': 'drop',
    },
    'density': {
        'kernel': 'gaussian',
        'bandwidth': None,  # None -> Silverman's rule
        'resolution': 200,
        'cut': 3.0,
    },
}

# Environment variable -> (config key, converter)
ENV_OVERRIDES = {
    'DISTVIZ_OUTPUT_DIR': ('output_dir', str),
    'DISTVIZ_FORMAT': ('format', str),
    'DISTVIZ_DPI': ('dpi', int),
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """
    Manage gallery configuration from defaults, a YAML/JSON file and the environment.

    Examples:
        >>> config = ConfigManager("gallery.yml")
        >>> config.get("density.kernel")
        'gaussian'
    """

    def __init__(self, config_path: Optional[str] = None, load_env: bool = True):
        self.config_path = Path(config_path) if config_path else None
        if load_env:
            load_dotenv()
        self.config = _merge(DEFAULT_CONFIG, self._load_config())
        self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration from file.

        Returns:
            Dictionary of configuration values (empty when no path was given)
        """
        if self.config_path is None:
            return {}
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        if self.config_path.suffix in ['.yaml', '.yml']:
            with open(self.config_path) as f:
                return yaml.safe_load(f) or {}
        elif self.config_path.suffix == '.json':
            with open(self.config_path) as f:
                return json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {self.config_path.suffix}")

    def _apply_env_overrides(self) -> None:
        for var, (key, convert) in ENV_OVERRIDES.items():
            raw = os.getenv(var)
            if raw:
                self.config[key] = convert(raw)

    def get(self, key: str, default: Any = None) -> Any:
        """Dotted lookup, e.g. ``get("histogram.bin_width")``."""
        node: Any = self.config
        for part in key.split('.'):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        parts = key.split('.')
        node = self.config
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value

    @property
    def output_dir(self) -> Path:
        return Path(self.get('output_dir'))
