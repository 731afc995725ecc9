#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

from .errors import ConfigError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("regsweep")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. REGSWEEP_CONFIG environment variable
    2. ~/.regsweep/ directory
    """
    if 'REGSWEEP_CONFIG' in os.environ:
        path = Path(os.environ['REGSWEEP_CONFIG'])
        if path.exists():
            return path

    regsweep_dir = Path.home() / '.regsweep'
    for filename in CONFIG_FILENAMES:
        path = regsweep_dir / filename
        if path.exists():
            return path

    # If no file exists, return default path
    return regsweep_dir / 'config.json'


def get_default_config():
    """Get default configuration."""
    return {
        "store": {
            "root": "",
            # Repository-level files that are not tag records
            "ignore_files": ["_index_images", "json"]
        },
        "retention": {
            "older_than": "20d"
        },
        "sweep": {
            "pretend": True
        },
        "report": {
            "name_width": 32,
            "time_format": "%Y-%m-%d %H:%M:%S UTC"
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        }
    }


def read_config_file(config_path):
    """Parse a JSON, TOML or YAML config file.

    Raises:
        ConfigError: The file cannot be read or parsed
    """
    try:
        if config_path.suffix.lower() in ['.toml']:
            with open(config_path, 'rb') as f:
                file_config = tomllib.load(f)
        elif config_path.suffix.lower() in ['.yaml', '.yml']:
            with open(config_path, 'r') as f:
                file_config = yaml.safe_load(f)
        else:
            # Default to JSON format
            with open(config_path, 'r') as f:
                file_config = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Error loading config from {config_path}: {e}") from e

    if file_config is None:
        return {}
    if not isinstance(file_config, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return file_config


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    # Load from file if it exists
    if config_path.exists():
        file_config = read_config_file(config_path)
        logger.debug(f"Loaded config from {config_path}")

        # Merge file config with defaults
        config = merge_configs(config, file_config)

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def configure_logging(config):
    """Apply the logging section of the config to the regsweep loggers."""
    log_config = config.get("logging", {})
    level_name = str(log_config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        logger.warning(f"Invalid logging level '{level_name}'. Defaulting to INFO.")
        level = logging.INFO

    logger.setLevel(level)

    fmt = log_config.get("format")
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt))


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            # Recursively merge nested dictionaries
            merged[key] = merge_configs(merged[key], value)
        else:
            # Override or add new key
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: REGSWEEP_SECTION_SUBSECTION_KEY
    For example: REGSWEEP_RETENTION_OLDER_THAN=7d
    """
    env_prefix = "REGSWEEP_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts_from_key = config_key.split('_')
                if key_parts[i : i + len(config_key_parts_from_key)] == config_key_parts_from_key:
                    if len(config_key_parts_from_key) > best_match_len:
                        best_match_len = len(config_key_parts_from_key)
                        matched_key = config_key

            if matched_key:
                # If we are at the end of the env var, we have found the key to set
                if i + best_match_len == len(key_parts):
                    if isinstance(current_level[matched_key], list):
                        # Lists are given comma-separated: REGSWEEP_STORE_IGNORE_FILES=a,b
                        typed_value = [part.strip() for part in value.split(',') if part.strip()]
                    current_level[matched_key] = typed_value
                    break

                # Otherwise, we descend into the dictionary
                if isinstance(current_level[matched_key], dict):
                    current_level = current_level[matched_key]
                    i += best_match_len
                else:
                    # Path conflict, e.g., env var is longer but we found a non-dict value
                    break
            else:
                # No match found
                break

    return config
