"""
Package role provides the role value type and the role hierarchy used by the
access control voters.
"""

from .role import (
    Role,
    normalize_role_names,
    normalize_roles,
    role_names
)

from .hierarchy import RoleHierarchy

__all__ = [
    'Role',
    'normalize_role_names',
    'normalize_roles',
    'role_names',
    'RoleHierarchy'
]
