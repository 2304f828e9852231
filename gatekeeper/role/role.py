"""
Role value type and role list normalization.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from ..errors import ConfigurationError


@dataclass(frozen=True)
class Role:
    """
    A named role. Two roles are equal when their names are equal.
    """
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ConfigurationError(
                "Role name must be a non-empty string",
                config_key="role",
                config_value=self.name
            )

    def get_role(self) -> str:
        """Return the role name."""
        return self.name

    def __str__(self) -> str:
        return self.name


def normalize_role_names(value: Any, config_key: Optional[str] = None) -> List[str]:
    """
    Normalize a scalar-or-list role value into an ordered list of role names.

    ``None`` yields an empty list, a string yields a one-element list and any
    other non-string sequence is copied element by element. Anything else is
    a configuration error.
    """
    if value is None:
        return []
    if isinstance(value, str):
        if not value:
            raise ConfigurationError(
                "Role name must be a non-empty string",
                config_key=config_key,
                config_value=value
            )
        return [value]
    if isinstance(value, Role):
        return [value.name]
    if isinstance(value, (list, tuple)):
        names = []
        for item in value:
            if isinstance(item, Role):
                names.append(item.name)
            elif isinstance(item, str) and item:
                names.append(item)
            else:
                raise ConfigurationError(
                    f"Invalid role name {item!r}",
                    config_key=config_key,
                    config_value=item
                )
        return names

    raise ConfigurationError(
        f"Roles must be a string or a list of strings, got {type(value).__name__}",
        config_key=config_key,
        config_value=value
    )


def normalize_roles(value: Any, config_key: Optional[str] = None) -> List[Role]:
    """Normalize a scalar-or-list role value into a list of Role instances."""
    return [Role(name) for name in normalize_role_names(value, config_key)]


def role_names(roles: Iterable[Role]) -> List[str]:
    return [role.name for role in roles]
