"""
Configuration loading

Settings come from config/<account>.yaml, with the token optionally
supplied by the HUBSPOT_TOKEN environment variable (or a .env file).
A --token on the command line beats both.
"""
import copy
import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from ..errors import ConfigError
from .file_helpers import load_yaml

logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = 'HUBSPOT_TOKEN'

DEFAULT_CONFIG = {
    'hubspot': {
        'token': '',
        'base_url': 'https://api.hubapi.com',
        'timeout': 30,
    },
    'throttle': {
        'create_delay': 0.25,
        'count_delay': 0.3,
    },
    'output': {
        'log_dir': 'logs',
        'log_level': 'INFO',
        'report_dir': 'reports',
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(account: Optional[str] = None, config_dir: Optional[Path] = None,
                token: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration for an account

    Args:
        account: Account name; reads config/<account>.yaml when given
        config_dir: Directory containing config files
        token: Token override (e.g. from --token)

    Returns:
        Configuration dictionary with defaults filled in

    Raises:
        ConfigError: if the named config file does not exist
    """
    load_dotenv()

    if config_dir is None:
        config_dir = Path('config')

    file_config = {}
    if account:
        config_file = Path(config_dir) / f'{account}.yaml'
        if not config_file.exists():
            raise ConfigError(
                f"Configuration file not found: {config_file}\n"
                f"Create one by copying config/account_template.yaml"
            )
        logger.info(f"Loading configuration: {config_file}")
        file_config = load_yaml(config_file)

    config = _merge(DEFAULT_CONFIG, file_config)

    if token:
        config['hubspot']['token'] = token
    elif not config['hubspot'].get('token') or 'YOUR_' in str(config['hubspot']['token']):
        config['hubspot']['token'] = os.environ.get(TOKEN_ENV_VAR, '')

    return config


def require_token(config: Dict[str, Any]) -> str:
    token = (config.get('hubspot', {}).get('token') or '').strip()
    if not token:
        raise ConfigError(
            f"No HubSpot token. Pass --token, set {TOKEN_ENV_VAR}, "
            f"or add hubspot.token to the account config"
        )
    return token
