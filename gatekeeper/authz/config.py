"""
Access control configuration.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..errors import ConfigurationError
from .types import AccessRule, DecisionStrategy


@dataclass
class AccessControlConfig:
    """Access control configuration: decision strategy and ordered rules."""
    decision_strategy: DecisionStrategy = DecisionStrategy.UNANIMOUS
    rules: List[AccessRule] = field(default_factory=list)
    path_matcher: str = "regex"

    def __post_init__(self):
        if not isinstance(self.rules, (list, tuple)):
            raise ConfigurationError(
                "Access control Rules must be a list",
                config_key="Rules",
                config_value=self.rules
            )
        self.rules = [
            rule if isinstance(rule, AccessRule) else AccessRule.from_dict(rule, index)
            for index, rule in enumerate(self.rules)
        ]

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'AccessControlConfig':
        """
        Create from the ``{DecisionStrategy: ..., Rules: [...]}`` mapping.

        Raises:
            ConfigurationError: For an unknown strategy or a malformed rule.
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigurationError(
                "Access control configuration must be a mapping",
                config_key="AccessControl",
                config_value=data
            )

        strategy = DecisionStrategy.parse(
            data.get('DecisionStrategy', data.get('decision_strategy', 'unanimous'))
        )

        return cls(
            decision_strategy=strategy,
            rules=data.get('Rules', data.get('rules')) or [],
            path_matcher=data.get('PathMatcher', data.get('path_matcher', 'regex'))
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'DecisionStrategy': self.decision_strategy.value,
            'Rules': [rule.to_dict() for rule in self.rules],
            'PathMatcher': self.path_matcher
        }
