"""
Security facade: builds the configured firewalls and hands them out by name.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .auth.encoder import Encoder, create_encoder
from .auth.types import Login
from .authz.access_control import AccessControl
from .authz.matcher import PathMatcher, create_path_matcher
from .authz.types import Decision, Principal
from .authz.voters import Voter
from .config import FirewallConfig, SecurityConfig
from .errors import SecurityError
from .metrics import DecisionMetrics
from .role import RoleHierarchy


logger = logging.getLogger(__name__)


class Firewall:
    """
    A named security area with its own role hierarchy, access rules and
    password encoder.

    The role hierarchy, encoder and path matcher are built once and shared
    read-only by every decision; each decision gets its own AccessControl.
    """

    def __init__(self, config: FirewallConfig, voters: Optional[Sequence[Voter]] = None,
                 metrics: Optional[DecisionMetrics] = None):
        """
        Raises:
            ConfigurationError: If any part of the firewall configuration is invalid.
        """
        self.config = config
        self.role_hierarchy = RoleHierarchy(config.role_hierarchy)
        self.encoder: Encoder = create_encoder(config.encoder)
        self.path_matcher: PathMatcher = create_path_matcher(config.access_control.path_matcher)
        for rule in config.access_control.rules:
            self.path_matcher.validate(rule.path)

        self._voters: List[Voter] = list(voters or [])
        self._metrics = metrics

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def realm(self) -> str:
        return self.config.realm

    @property
    def voters(self) -> List[Voter]:
        return list(self._voters)

    def create_password_hash(self, password: str) -> str:
        """Hash a password with this firewall's encoder."""
        return self.encoder.create_password_hash(password)

    def check_credentials(self, login: Login, password_hash: str) -> bool:
        """
        Check the password collected in ``login`` against a stored hash.

        Returns:
            bool: True if the password matches, otherwise False
        """
        valid = self.encoder.verify_password_hash(login.password, password_hash)
        if not valid:
            logger.warning(f"Invalid credentials for {login.username or 'unknown user'} on firewall {self.name}")
        return valid

    def add_voter(self, voter: Voter) -> None:
        """Register an additional voter for this firewall's decisions."""
        self._voters.append(voter)
        logger.debug(f"Registered voter {voter.name} on firewall {self.name}")

    def access_control(self, principal: Principal) -> AccessControl:
        """Create an AccessControl for the given principal."""
        return AccessControl(
            principal,
            self.config.access_control,
            voters=self._voters,
            role_hierarchy=self.role_hierarchy,
            path_matcher=self.path_matcher,
            metrics=self._metrics
        )

    def is_user_allowed_access(self, principal: Principal, path: Optional[str] = None) -> bool:
        """Check if the principal may access ``path`` (or the current request path)."""
        return self.access_control(principal).is_allowed_access(path)

    def decide(self, principal: Principal, path: Optional[str] = None) -> Decision:
        return self.access_control(principal).decide(path)

    def __repr__(self) -> str:
        return f"Firewall(name={self.name!r}, realm={self.realm!r})"


class Security:
    """
    Entry point to the configured firewalls.

    Example:
        security = Security.from_file("security.yaml")
        allowed = security.firewall("Admin").is_user_allowed_access(user, "/admin")
    """

    def __init__(self, config: SecurityConfig,
                 voters: Optional[Mapping[str, Sequence[Voter]]] = None,
                 metrics: Optional[DecisionMetrics] = None):
        """
        Args:
            config: Security configuration
            voters: Extra voters per firewall name
            metrics: Optional decision metrics shared by all firewalls
        """
        voters = voters or {}
        unknown = set(voters) - set(config.firewalls)
        if unknown:
            raise SecurityError(
                f"Voters given for undefined firewalls: {', '.join(sorted(unknown))}"
            )

        self.config = config
        self._firewalls: Dict[str, Firewall] = {
            name: Firewall(fw_config, voters.get(name), metrics)
            for name, fw_config in config.firewalls.items()
        }
        logger.info(f"Security initialized with firewalls: {', '.join(self._firewalls) or 'none'}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], **kwargs) -> 'Security':
        return cls(SecurityConfig.from_dict(data), **kwargs)

    @classmethod
    def from_file(cls, file_path: str, **kwargs) -> 'Security':
        return cls(SecurityConfig.from_file(file_path), **kwargs)

    def firewall(self, name: str) -> Firewall:
        """
        Return the firewall with the given name.

        Raises:
            SecurityError: If no such firewall is configured.
        """
        try:
            return self._firewalls[name]
        except KeyError:
            raise SecurityError(f"Firewall '{name}' is not defined") from None

    def firewall_names(self) -> List[str]:
        return list(self._firewalls)
