"""
gatekeeper Python Package

Voting access control over a role hierarchy, with firewalls, password
encoders and an OAuth2 authentication provider.
"""

__version__ = "0.1.0"

from .security import Security, Firewall
from .config import SecurityConfig, FirewallConfig
from .authz import (
    AccessControl,
    AccessControlConfig,
    AccessRule,
    AuthenticationVoter,
    Decision,
    DecisionStrategy,
    Principal,
    RoleVoter,
    Voter,
    request_scope,
)
from .auth import User
from .role import Role, RoleHierarchy
from .errors import (
    GatekeeperError,
    ConfigurationError,
    SecurityError,
    OAuth2Error,
)

__all__ = [
    "Security",
    "Firewall",
    "SecurityConfig",
    "FirewallConfig",
    "AccessControl",
    "AccessControlConfig",
    "AccessRule",
    "AuthenticationVoter",
    "Decision",
    "DecisionStrategy",
    "Principal",
    "RoleVoter",
    "Voter",
    "request_scope",
    "User",
    "Role",
    "RoleHierarchy",
    "GatekeeperError",
    "ConfigurationError",
    "SecurityError",
    "OAuth2Error",
]
