"""
Persistent configuration management for BlackGrid.

Handles user preferences (col-def endpoint, timeouts, grid defaults)
and config file storage.
"""

import os
import json
from pathlib import Path


# Defaults for a fresh install. New keys added here are merged into
# existing config files on load.
DEFAULT_CONFIG = {
    'api_base_url': 'http://localhost:3000/api',
    'request_timeout': 10.0,
    'click_debounce_ms': 200,
    'default_page_size': 20,
    'default_form_width': 500,
}


def get_config_dir():
    """
    Get platform-specific config directory.

    Returns:
        Path: Config directory path

    Platform paths:
    - Windows: C:/Users/{username}/AppData/Roaming/BlackGrid
    - Mac: ~/Library/Application Support/BlackGrid
    - Linux: ~/.config/BlackGrid (or $XDG_CONFIG_HOME/BlackGrid)
    """
    import sys

    if sys.platform == 'win32':
        base = os.environ.get('APPDATA', os.path.expanduser('~'))
        config_dir = Path(base) / 'BlackGrid'
    elif sys.platform == 'darwin':
        config_dir = Path.home() / 'Library' / 'Application Support' / 'BlackGrid'
    else:
        base = os.environ.get('XDG_CONFIG_HOME') or str(Path.home() / '.config')
        config_dir = Path(base) / 'BlackGrid'

    config_dir.mkdir(parents=True, exist_ok=True)

    return config_dir


def get_config_path():
    """
    Get full path to config file.

    Returns:
        Path: Config file path (e.g., ~/.config/BlackGrid/config.json)
    """
    return get_config_dir() / 'config.json'


def load_config():
    """
    Load config from file. Returns default config if file doesn't exist.

    Returns:
        dict: Config dictionary with keys:
            - api_base_url (str): Base URL the col-def endpoint hangs off
            - request_timeout (float): Seconds before a remote call gives up
            - click_debounce_ms (int): Row click vs double-click window
            - default_page_size (int): Page size when the host gives none
            - default_form_width (int): Record form width in pixels
    """
    config_path = get_config_path()
    default_config = dict(DEFAULT_CONFIG)

    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                config = json.load(f)

            # Merge with defaults (in case new keys added in update)
            for key, value in default_config.items():
                if key not in config:
                    config[key] = value

            return config

        except Exception as e:
            print(f"[Config] Warning: Could not load config: {e}")
            return default_config
    else:
        return default_config


def save_config(config):
    """
    Save config to file.

    Args:
        config (dict): Config dictionary to save

    Returns:
        bool: True if successful, False otherwise
    """
    try:
        config_path = get_config_path()

        with open(config_path, 'w') as f:
            json.dump(config, indent=2, fp=f)

        return True

    except Exception as e:
        print(f"[Config] Warning: Could not save config: {e}")
        return False


def update_config(key, value):
    """
    Update a single config value and save.

    Args:
        key (str): Config key to update
        value: New value

    Returns:
        bool: True if successful, False otherwise
    """
    try:
        config = load_config()
        config[key] = value
        return save_config(config)
    except Exception as e:
        print(f"[Config] Warning: Could not update '{key}': {e}")
        return False


def get_setting(key):
    """Get a single config value, falling back to the built-in default."""
    return load_config().get(key, DEFAULT_CONFIG.get(key))


# Convenience functions
def get_api_base_url():
    """Base URL of the column definition API (no trailing slash)."""
    return str(get_setting('api_base_url')).rstrip('/')


def get_request_timeout():
    """Timeout in seconds for col-def requests."""
    try:
        return float(get_setting('request_timeout'))
    except (TypeError, ValueError):
        return DEFAULT_CONFIG['request_timeout']


def get_click_debounce_ms():
    """Delay before a single click is treated as a row click."""
    try:
        return int(get_setting('click_debounce_ms'))
    except (TypeError, ValueError):
        return DEFAULT_CONFIG['click_debounce_ms']
