"""
Configuration for the OAuth2 servers and the in-memory services.

Lifetimes are kept in seconds. When loaded from the environment or a file
they may also be written as duration strings such as ``30s``, ``5m``, ``2h``
or ``14d``.
"""

import json
import logging
import os
import re
from dataclasses import dataclass, fields
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_REALM = "Service"
DEFAULT_ACCESS_TOKEN_LIFETIME = 60 * 60
DEFAULT_REFRESH_TOKEN_LIFETIME = 14 * 24 * 60 * 60
DEFAULT_AUTHORIZATION_CODE_LIFETIME = 5 * 60

LIFETIME_FIELDS = (
    'access_token_lifetime',
    'refresh_token_lifetime',
    'authorization_code_lifetime',
)

_DURATION = re.compile(r'^(\d+(?:\.\d+)?)\s*([smhd])$')
_UNITS = {'s': 'seconds', 'm': 'minutes', 'h': 'hours', 'd': 'days'}


def parse_duration_string(duration_str: str) -> timedelta:
    """
    Parse duration string like '30s', '5m', '2h', '1d' into timedelta.
    """
    if not isinstance(duration_str, str):
        raise ValueError("Duration must be a string")

    duration_str = duration_str.strip().lower()
    match = _DURATION.match(duration_str)
    if not match:
        raise ValueError(f"Invalid duration format: {duration_str}")

    value, unit = match.groups()
    return timedelta(**{_UNITS[unit]: float(value)})


def parse_lifetime(value: Union[int, float, str, timedelta]) -> int:
    """Convert a lifetime given as seconds, digits or a duration string to seconds."""
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    if isinstance(value, bool):
        raise ValueError(f"Invalid lifetime: {value}")
    if isinstance(value, (int, float)):
        return int(value)
    value = value.strip()
    if value.isdigit():
        return int(value)
    return int(parse_duration_string(value).total_seconds())


def load_config_from_env(prefix: str = "OAUTH2_") -> Dict[str, str]:
    """
    Load configuration from environment variables with given prefix.
    """
    config = {}

    for key, value in os.environ.items():
        if key.startswith(prefix):
            config[key[len(prefix):].lower()] = value

    return config


def load_config_file(file_path: Union[str, Path]) -> Dict[str, Any]:
    """Load configuration from a file (JSON or YAML)."""
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    file_ext = path.suffix.lower()

    with open(path, 'r', encoding='utf-8') as f:
        if file_ext == '.json':
            data = json.load(f)
        elif file_ext in ('.yaml', '.yml'):
            data = yaml.safe_load(f)
        else:
            raise ValueError(f"Unsupported configuration file format: {file_ext}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {file_path}")
    return data


@dataclass
class ServerConfig:
    """Configuration for resource and authorization servers."""
    realm: str = DEFAULT_REALM
    access_token_lifetime: int = DEFAULT_ACCESS_TOKEN_LIFETIME
    refresh_token_lifetime: int = DEFAULT_REFRESH_TOKEN_LIFETIME
    authorization_code_lifetime: int = DEFAULT_AUTHORIZATION_CODE_LIFETIME
    # login page the authorize endpoint redirects to without a session
    login_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServerConfig":
        """Create and validate configuration from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            key = key.lower().replace('-', '_')
            if key not in known:
                logger.debug(f"Ignoring unknown configuration key {key}")
                continue
            if key in LIFETIME_FIELDS:
                value = parse_lifetime(value)
            values[key] = value
        config = cls(**values)
        config.validate()
        return config

    @classmethod
    def from_env(cls, prefix: str = "OAUTH2_") -> "ServerConfig":
        """Create configuration from environment variables"""
        return cls.from_dict(load_config_from_env(prefix))

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> "ServerConfig":
        """Create configuration from a JSON or YAML file"""
        return cls.from_dict(load_config_file(file_path))

    def validate(self) -> bool:
        """Validate the configuration"""
        if not self.realm:
            raise ValueError("realm is required")
        if '"' in self.realm:
            raise ValueError("realm must not contain double quotes")
        if self.access_token_lifetime <= 0:
            raise ValueError("access_token_lifetime must be positive")
        if self.refresh_token_lifetime < 0:
            raise ValueError("refresh_token_lifetime must not be negative")
        if self.authorization_code_lifetime <= 0:
            raise ValueError("authorization_code_lifetime must be positive")
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result = {
            'realm': self.realm,
            'access_token_lifetime': self.access_token_lifetime,
            'refresh_token_lifetime': self.refresh_token_lifetime,
            'authorization_code_lifetime': self.authorization_code_lifetime,
        }
        if self.login_url is not None:
            result['login_url'] = self.login_url
        return result
