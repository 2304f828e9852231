"""
Voters for access control decisions.

A voter looks at the principal and the roles a path requires and returns a
signed vote: positive grants, negative denies, zero abstains.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ..role import Role, RoleHierarchy
from .types import ACCESS_DENIED, ACCESS_GRANTED, Principal


class Voter(ABC):
    """
    Base class for access control voters.

    Voters receive everything they need as call arguments and must never
    raise; a voter that cannot decide should return ``ACCESS_ABSTAIN``.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    def supports_principal_kind(self, kind: str) -> bool:
        """
        Check if this voter takes part in decisions for the given principal kind.

        Args:
            kind: The principal's ``kind`` identifier

        Returns:
            bool: True if the voter should be polled, False to skip it
        """
        return True

    @abstractmethod
    def vote(self, principal: Principal, requested_roles: Sequence[Role]) -> int:
        """
        Vote on granting access.

        Args:
            principal: The principal requesting access
            requested_roles: Roles required by the matched access rule

        Returns:
            int: Positive to grant, negative to deny, zero to abstain
        """
        pass


class AuthenticationVoter(Voter):
    """
    Grants access to authenticated principals and denies it to anonymous ones.
    """

    def vote(self, principal: Principal, requested_roles: Sequence[Role]) -> int:
        if principal.is_authenticated():
            return ACCESS_GRANTED
        return ACCESS_DENIED


class RoleVoter(Voter):
    """
    Grants access when the principal holds, directly or through the role
    hierarchy, at least one of the requested roles.
    """

    def __init__(self, role_hierarchy: Optional[RoleHierarchy] = None):
        self.role_hierarchy = role_hierarchy or RoleHierarchy()

    def vote(self, principal: Principal, requested_roles: Sequence[Role]) -> int:
        granted = self.role_hierarchy.get_accessible_roles(principal.get_roles())
        granted_names = {role.name for role in granted}

        if any(role.name in granted_names for role in requested_roles):
            return ACCESS_GRANTED
        return ACCESS_DENIED
