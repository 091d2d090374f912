import copy
import dataclasses
import logging
import os
from typing import Any, Dict, List, Optional

import yaml
from jinja2 import Template

from .aggregations import AnalysisThresholds

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'configs', 'budget_insights.yaml')

GENERAL_INSIGHT_MODES = ('snapshot', 'help', 'sampled')

DEFAULT_SETTINGS: Dict[str, Any] = {
    'general_insight_mode': 'snapshot',
    'random_seed': None,
    'currency_symbol': '$',
    'top_n': 5,
    'best_worst_n': 3,
}


def load_config(yaml_path: str) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        yaml_path: Path to the YAML configuration file

    Returns:
        Dictionary containing the parsed configuration
    """
    try:
        with open(yaml_path, 'r', encoding='utf-8') as file:
            config = yaml.safe_load(file)
    except FileNotFoundError:
        raise FileNotFoundError(f"Configuration file not found: {yaml_path}")
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Error parsing YAML configuration: {e}")
    logger.info(f"Loaded configuration from {yaml_path}")
    return config or {}


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep-merge override on top of base without modifying either.

    Nested dictionaries are merged key by key; any other value in override
    replaces the base value.
    """
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_default_config(override_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the packaged configuration, optionally overlaid with a user file.

    Args:
        override_path: Optional path to a user YAML file

    Returns:
        Merged configuration dictionary
    """
    config = load_config(DEFAULT_CONFIG_PATH)
    if override_path:
        config = merge_configs(config, load_config(override_path))
    return config


def get_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Get general settings with defaults filled in.

    Raises:
        ValueError: If general_insight_mode is not a known mode
    """
    settings = dict(DEFAULT_SETTINGS)
    settings.update(config.get('settings') or {})
    if settings['general_insight_mode'] not in GENERAL_INSIGHT_MODES:
        raise ValueError(
            f"Unknown general_insight_mode '{settings['general_insight_mode']}'; "
            f"expected one of {', '.join(GENERAL_INSIGHT_MODES)}"
        )
    return settings


def get_thresholds(config: Dict[str, Any]) -> AnalysisThresholds:
    """
    Build AnalysisThresholds from the 'thresholds' section.

    Unknown keys are ignored with a warning; missing keys keep their defaults.
    """
    values = config.get('thresholds') or {}
    known = {f.name for f in dataclasses.fields(AnalysisThresholds)}
    unknown = sorted(set(values) - known)
    if unknown:
        logger.warning(f"Ignoring unknown threshold keys: {unknown}")
    return AnalysisThresholds(**{k: float(v) for k, v in values.items() if k in known})


def get_template(config: Dict[str, Any], template_name: str) -> str:
    """
    Get a narrative template by name.

    Raises:
        KeyError: If the template is not defined
    """
    templates = config.get('templates') or {}
    if template_name not in templates:
        raise KeyError(f"Narrative template not found: {template_name}")
    return templates[template_name]


def get_example_questions(config: Dict[str, Any]) -> List[str]:
    return list(config.get('example_questions') or [])


def render_template(config: Dict[str, Any], template_name: str, **params) -> str:
    """Render a named template with Jinja2."""
    jinja_template = Template(get_template(config, template_name))
    return jinja_template.render(**params).strip()
