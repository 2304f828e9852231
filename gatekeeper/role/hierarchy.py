"""
Role hierarchy.

Reads the configured role hierarchy and flattens it into a map of
role name -> every role name it implies, directly or through other roles.
"""

import logging
from collections import deque
from typing import Any, Dict, List, Mapping, Sequence

from ..errors import ConfigurationError
from .role import Role, normalize_role_names


logger = logging.getLogger(__name__)


class RoleHierarchy:
    """
    Transitive closure over a ``senior role -> implied roles`` mapping.

    The map is built once in the constructor and never mutated afterwards, so
    a single instance can be shared between concurrent decisions.
    """

    def __init__(self, hierarchy: Mapping[str, Any] = None):
        """
        Args:
            hierarchy: Role hierarchy from the security configuration. Each
                value is a role name or a list of role names.

        Raises:
            ConfigurationError: If the hierarchy is malformed.
        """
        self._map: Dict[str, List[str]] = {}
        self._build_role_map(hierarchy or {})

    def get_accessible_roles(self, roles: Sequence[Role]) -> List[Role]:
        """
        Return the given roles followed by every role they imply.

        Input roles keep their order and come first; implied roles follow in
        the order they were discovered. Duplicates are dropped.
        """
        accessible: List[Role] = []
        seen = set()

        def add(role: Role) -> None:
            if role.name not in seen:
                seen.add(role.name)
                accessible.append(role)

        for role in roles:
            add(role)

        for role in roles:
            for name in self._map.get(role.name, ()):
                add(Role(name))

        return accessible

    def get_implied_role_names(self, role_name: str) -> List[str]:
        """Return the flattened list of role names implied by ``role_name``."""
        return list(self._map.get(role_name, ()))

    def to_dict(self) -> Dict[str, List[str]]:
        """Return a copy of the flattened hierarchy map."""
        return {role: list(implied) for role, implied in self._map.items()}

    def __contains__(self, role_name: str) -> bool:
        return role_name in self._map

    def __len__(self) -> int:
        return len(self._map)

    def _build_role_map(self, hierarchy: Mapping[str, Any]) -> None:
        if not isinstance(hierarchy, Mapping):
            logger.error(f"Invalid role hierarchy type: {type(hierarchy).__name__}")
            raise ConfigurationError(
                "Role hierarchy must be a mapping of role names",
                config_key="RoleHierarchy",
                config_value=hierarchy
            )

        direct: Dict[str, List[str]] = {}
        for main, roles in hierarchy.items():
            if not isinstance(main, str) or not main:
                raise ConfigurationError(
                    f"Invalid role name {main!r} in role hierarchy",
                    config_key="RoleHierarchy",
                    config_value=main
                )
            direct[main] = normalize_role_names(roles, config_key=f"RoleHierarchy.{main}")

        for main, roles in direct.items():
            flattened = _unique(roles)
            parsed = set()
            pending = deque(roles)

            while pending:
                role = pending.popleft()
                # leaf roles and roles already expanded for this root
                if role not in direct or role in parsed:
                    continue

                parsed.add(role)
                for implied in direct[role]:
                    if implied not in flattened:
                        flattened.append(implied)
                pending.extend(r for r in direct[role] if r not in parsed)

            self._map[main] = flattened

        logger.debug(f"Built role hierarchy map for {len(self._map)} roles")


def _unique(names: Sequence[str]) -> List[str]:
    result = []
    for name in names:
        if name not in result:
            result.append(name)
    return result
