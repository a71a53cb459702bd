
import copy
import os

import yaml

from selection_translator.logging_config import get_logger
from selection_translator.models import DEFAULT_ENDPOINTS, Provider
from selection_translator.shortcuts import default_shortcut

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = "config.yml"

# Default configuration to fall back on if config.yml is missing or incomplete.
# An empty provider endpoint means "the default endpoint for provider.id".
DEFAULT_CONFIG = {
    "provider": {
        "id": Provider.OLLAMA.value,
        "endpoint": "",
        "model": "llama3",
        "api_key": "",
        "timeout": 120,
    },
    "translation": {
        "source_lang": "auto",
        "target_lang": "Japanese",
        "explain": False,
    },
    "hotkey": {
        "shortcut": default_shortcut(),
        "backend": "auto",
        "settle_delay": 0.1,
    },
    "logging": {
        "level": "INFO",
    },
}


def load_config(config_path=DEFAULT_CONFIG_PATH):
    """
    Loads configuration from a YAML file.
    Returns a dictionary with configuration values, merged with defaults.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if not os.path.exists(config_path):
        logger.warning("Configuration file '%s' not found. Using defaults.", config_path)
        return resolve_endpoint(config)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error("Error loading config file '%s': %s", config_path, e)
        return resolve_endpoint(config)

    if isinstance(user_config, dict):
        # Merge one level deep for the nested sections
        for key, value in user_config.items():
            if isinstance(value, dict) and isinstance(config.get(key), dict):
                config[key].update(value)
            else:
                config[key] = value
    elif user_config is not None:
        logger.error("Config file '%s' must contain a mapping. Using defaults.", config_path)

    return resolve_endpoint(config)


def resolve_endpoint(config):
    """Fills in the provider's default endpoint when none is configured."""
    provider = config["provider"]
    if not (provider.get("endpoint") or "").strip():
        provider["endpoint"] = DEFAULT_ENDPOINTS[Provider.from_id(provider.get("id"))]
    return config


def save_config(config, config_path=DEFAULT_CONFIG_PATH):
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config, f, sort_keys=False, allow_unicode=True)


def get_config_value(config, key_path, default=None):
    """
    Helper to get nested config values safely.
    key_path example: "provider.model"
    """
    keys = key_path.split('.')
    value = config
    for k in keys:
        if isinstance(value, dict):
            value = value.get(k)
        else:
            return default
    return value if value is not None else default
