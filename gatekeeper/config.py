"""
Configuration module for gatekeeper.

Security configuration is a mapping of firewalls; each firewall carries its
role hierarchy, access control rules and password encoder. Configuration can
be built from dictionaries, JSON/YAML files or the environment.

Example (YAML):

    Security:
      Firewalls:
        Admin:
          Realm: Administration
          Encoder: sha256
          RoleHierarchy:
            ROLE_ADMIN: ROLE_EDITOR
            ROLE_EDITOR: [ROLE_USER]
          AccessControl:
            DecisionStrategy: unanimous
            Rules:
              - Path: ^/admin
                Roles: ROLE_ADMIN
"""

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .authz.config import AccessControlConfig
from .errors import ConfigurationError


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "GATEKEEPER_CONFIG"


@dataclass
class FirewallConfig:
    """Configuration of a single firewall."""
    name: str
    realm: str = ""
    encoder: str = "sha256"
    role_hierarchy: Dict[str, Any] = field(default_factory=dict)
    access_control: AccessControlConfig = field(default_factory=AccessControlConfig)

    @classmethod
    def from_dict(cls, name: str, data: Optional[Mapping[str, Any]]) -> 'FirewallConfig':
        data = data or {}
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Firewall '{name}' configuration must be a mapping",
                config_key=f"Firewalls.{name}",
                config_value=data
            )

        hierarchy = data.get('RoleHierarchy', data.get('role_hierarchy')) or {}
        if not isinstance(hierarchy, Mapping):
            raise ConfigurationError(
                f"Firewall '{name}' RoleHierarchy must be a mapping",
                config_key=f"Firewalls.{name}.RoleHierarchy",
                config_value=hierarchy
            )

        return cls(
            name=name,
            realm=data.get('Realm', data.get('realm', name)),
            encoder=data.get('Encoder', data.get('encoder', 'sha256')),
            role_hierarchy=dict(hierarchy),
            access_control=AccessControlConfig.from_dict(
                data.get('AccessControl', data.get('access_control'))
            )
        )


@dataclass
class SecurityConfig:
    """Top level security configuration."""
    firewalls: Dict[str, FirewallConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'SecurityConfig':
        """
        Create from a configuration mapping, with or without the top level
        ``Security`` key.
        """
        data = data or {}
        if isinstance(data, Mapping) and 'Security' in data:
            data = data['Security'] or {}
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                "Security configuration must be a mapping",
                config_key="Security",
                config_value=data
            )

        firewalls = data.get('Firewalls', data.get('firewalls')) or {}
        if not isinstance(firewalls, Mapping):
            raise ConfigurationError(
                "Firewalls must be a mapping of firewall names",
                config_key="Firewalls",
                config_value=firewalls
            )

        return cls(firewalls={
            name: FirewallConfig.from_dict(name, fw) for name, fw in firewalls.items()
        })

    @classmethod
    def from_file(cls, file_path: str, expand_variables: bool = True) -> 'SecurityConfig':
        """Load configuration from a JSON or YAML file."""
        data = load_config_file(file_path)
        if expand_variables:
            data = expand_config_variables(data)
        logger.info(f"Loaded security configuration from {file_path}")
        return cls.from_dict(data)

    @classmethod
    def from_env(cls) -> 'SecurityConfig':
        """Load configuration from the file named by GATEKEEPER_CONFIG."""
        file_path = os.getenv(CONFIG_ENV_VAR)
        if not file_path:
            raise ConfigurationError(
                f"{CONFIG_ENV_VAR} environment variable is not set",
                config_key=CONFIG_ENV_VAR
            )
        return cls.from_file(file_path)


def load_config_file(file_path: str) -> Dict[str, Any]:
    """Load configuration from a file (JSON or YAML)."""
    if not os.path.exists(file_path):
        raise ConfigurationError(
            f"Configuration file not found: {file_path}",
            config_key="file",
            config_value=file_path
        )

    file_ext = Path(file_path).suffix.lower()

    with open(file_path, 'r', encoding='utf-8') as f:
        try:
            if file_ext == '.json':
                data = json.load(f)
            elif file_ext in ['.yaml', '.yml']:
                data = yaml.safe_load(f)
            else:
                raise ConfigurationError(
                    f"Unsupported configuration file format: {file_ext}",
                    config_key="file",
                    config_value=file_path
                )
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            logger.error(f"Failed to parse configuration file {file_path}: {e}")
            raise ConfigurationError(
                f"Invalid configuration file {file_path}: {e}",
                config_key="file",
                config_value=file_path
            ) from e

    data = data or {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file {file_path} must hold a mapping at the top level",
            config_key="file",
            config_value=file_path
        )
    return data


def expand_config_variables(config: Any,
                            variables: Optional[Dict[str, str]] = None) -> Any:
    """
    Expand variables in configuration values.
    Variables are specified as ${VAR_NAME} in config values.
    """
    if variables is None:
        variables = dict(os.environ)

    pattern = re.compile(r'\$\{([^}]+)\}')

    def expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return pattern.sub(lambda m: variables.get(m.group(1), m.group(0)), value)
        elif isinstance(value, dict):
            return {k: expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [expand_value(item) for item in value]
        else:
            return value

    return expand_value(config)
