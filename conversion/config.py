"""
Configuration loading and validation for the EDF → CFS converter.

Functions:
- default_config() - Built-in defaults
- load_config() - Read JSON config file
- validate_conversion_config() - Validate all sections
- merge_config_with_args() - CLI argument override
- role_map_from_config() - ChannelRoleMap, if all four labels are set
"""

import argparse
import copy
import json
from pathlib import Path
from typing import Optional

from .channels import ChannelRoleMap
from .constants import CHANNEL_KEYS

# Resolve module directory for path-robust operations
MODULE_DIR = Path(__file__).parent.resolve()

_DEFAULTS = {
    "channels": {key: None for key in CHANNEL_KEYS},
    "conversion": {
        "overwrite": False,
        "workers": None,
        "quiet": False,
        "save_log": False,
    },
}

_BOOL_FIELDS = ("overwrite", "quiet", "save_log")


def default_config() -> dict:
    """Fresh copy of the built-in defaults."""
    return copy.deepcopy(_DEFAULTS)


def load_config(config_path) -> dict:
    """
    Load conversion configuration from a JSON file.

    Missing sections/fields are filled from the defaults.

    Raises:
        ValueError: If the file is missing or not valid JSON
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            loaded = json.load(f)
    except FileNotFoundError:
        raise ValueError(f"Config file not found: {config_path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")
    except OSError as e:
        raise ValueError(f"Failed to read config file: {e}")

    if not isinstance(loaded, dict):
        raise ValueError("Config file must contain a JSON object")

    config = default_config()
    for section in ("channels", "conversion"):
        if section in loaded:
            if not isinstance(loaded[section], dict):
                raise ValueError(f"Section '{section}' must be an object")
            config[section].update(loaded[section])

    print(f"[CONFIG] Loaded configuration from: {config_path}")
    return config


def validate_conversion_config(config: dict) -> None:
    """
    Validate conversion configuration.

    Raises:
        ValueError: If configuration is invalid
    """
    for section in ("channels", "conversion"):
        if section not in config:
            raise ValueError(f"Missing required section: {section}")

    unknown = set(config["channels"]) - set(CHANNEL_KEYS)
    if unknown:
        raise ValueError(f"Unknown channel keys: {sorted(unknown)} (expected {list(CHANNEL_KEYS)})")

    for key in CHANNEL_KEYS:
        label = config["channels"].get(key)
        if label is not None and (not isinstance(label, str) or not label.strip()):
            raise ValueError(f"channels.{key} must be a non-empty string or null")

    conv = config["conversion"]
    for name in _BOOL_FIELDS:
        if not isinstance(conv.get(name), bool):
            raise ValueError(f"conversion.{name} must be true or false")

    workers = conv.get("workers")
    if workers is not None:
        if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
            raise ValueError(f"conversion.workers must be a positive integer or null, got: {workers}")


def merge_config_with_args(config: dict, args: argparse.Namespace) -> dict:
    """
    Merge configuration with command-line arguments.
    CLI arguments take precedence over the config file.
    """
    for key in CHANNEL_KEYS:
        value = getattr(args, key, None)
        if value is not None:
            config["channels"][key] = value

    if getattr(args, "workers", None) is not None:
        config["conversion"]["workers"] = args.workers
        print(f"    [OVERRIDE] workers = {args.workers} (from CLI)")

    # Switches can only turn a setting on
    for name in _BOOL_FIELDS:
        if getattr(args, name, False):
            config["conversion"][name] = True

    return config


def role_map_from_config(config: dict) -> Optional[ChannelRoleMap]:
    """ChannelRoleMap from config['channels'], or None if any label is unset."""
    labels = [config["channels"].get(key) for key in CHANNEL_KEYS]
    if any(label is None for label in labels):
        return None
    return ChannelRoleMap.from_labels(*labels)


def get_default_config_path() -> Path:
    """Default config.json path (module directory)."""
    return MODULE_DIR / "config.json"
