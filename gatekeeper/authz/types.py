"""
Authorization types for gatekeeper.
Implements decision strategies, votes, access rules, principals and decisions.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..errors import ConfigurationError
from ..role import Role, normalize_roles


# Vote values
ACCESS_GRANTED = 1
ACCESS_ABSTAIN = 0
ACCESS_DENIED = -1


class DecisionStrategy(Enum):
    """How the votes of all voters are turned into a single ruling."""

    # 1 single voter denies access
    UNANIMOUS = "unanimous"

    # 1 single vote grants access
    AFFIRMATIVE = "affirmative"

    # Majority wins
    CONSENSUS = "consensus"

    @classmethod
    def parse(cls, value: Any) -> 'DecisionStrategy':
        """
        Convert a configured strategy value into a DecisionStrategy.

        Raises:
            ConfigurationError: If the value is not a known strategy.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.UNANIMOUS
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(
                f'Invalid access control decision strategy "{value}"',
                config_key="DecisionStrategy",
                config_value=value
            )


class Principal(ABC):
    """
    The actor requesting access.

    ``kind`` identifies the principal implementation so that voters can
    declare which kinds of principal they understand.
    """

    @property
    def kind(self) -> str:
        return type(self).__name__

    @abstractmethod
    def get_roles(self) -> List[Role]:
        """Return the roles granted directly to this principal."""
        pass

    @abstractmethod
    def is_authenticated(self) -> bool:
        """Return True unless the principal is anonymous."""
        pass


@dataclass(frozen=True)
class AccessRule:
    """
    Path pattern and the roles required to access paths matching it.
    """
    path: str
    roles: Tuple[Role, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], index: int = 0) -> 'AccessRule':
        """
        Create a rule from its ``{Path: ..., Roles: ...}`` configuration entry.

        Raises:
            ConfigurationError: If the entry is malformed.
        """
        key = f"Rules[{index}]"
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Access rule must be a mapping, got {type(data).__name__}",
                config_key=key,
                config_value=data
            )

        path = data.get('Path', data.get('path'))
        if not isinstance(path, str) or not path:
            raise ConfigurationError(
                "Access rule is missing a Path pattern",
                config_key=f"{key}.Path",
                config_value=path
            )

        roles = data.get('Roles', data.get('roles'))
        return cls(path=path, roles=tuple(normalize_roles(roles, config_key=f"{key}.Roles")))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'Path': self.path,
            'Roles': [role.name for role in self.roles]
        }


@dataclass
class Decision:
    """
    Outcome of a single access decision, with the tally that produced it.
    """
    allowed: bool
    strategy: DecisionStrategy
    path: str
    requested_roles: List[Role] = field(default_factory=list)
    vote_score: int = 0
    max_score: int = 0
    votes: Dict[str, int] = field(default_factory=dict)
    rule: Optional[AccessRule] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'allowed': self.allowed,
            'strategy': self.strategy.value,
            'path': self.path,
            'requested_roles': [role.name for role in self.requested_roles],
            'vote_score': self.vote_score,
            'max_score': self.max_score,
            'votes': dict(self.votes),
            'rule': self.rule.to_dict() if self.rule else None,
            'timestamp': self.timestamp.isoformat()
        }
