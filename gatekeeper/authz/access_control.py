"""
Access control for gatekeeper.

AccessControl talks to the voters and accumulates the vote scoring. Then,
based on the selected decision strategy, it makes a ruling either to allow
access for the current principal, or to deny it.
"""

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
import logging

from ..errors import ConfigurationError, SecurityError
from ..metrics import DecisionMetrics
from ..role import Role, RoleHierarchy
from .config import AccessControlConfig
from .context import get_current_path
from .matcher import PathMatcher, create_path_matcher
from .types import AccessRule, Decision, DecisionStrategy, Principal
from .voters import AuthenticationVoter, RoleVoter, Voter


logger = logging.getLogger(__name__)


def tally_votes(strategy: DecisionStrategy, votes: Iterable[int]) -> Tuple[int, int]:
    """
    Accumulate votes into ``(vote_score, max_score)`` for the given strategy.

    - affirmative: only positive votes count, toward both scores
    - consensus: every vote counts toward the max score, positive votes
      toward the vote score
    - unanimous: every nonzero vote counts toward both, with its sign
    """
    vote_score = 0
    max_score = 0

    for vote in votes:
        if strategy == DecisionStrategy.AFFIRMATIVE:
            if vote > 0:
                max_score += 1
                vote_score += vote
        elif strategy == DecisionStrategy.CONSENSUS:
            if vote > 0:
                vote_score += vote
            max_score += 1
        elif vote != 0:
            max_score += 1
            vote_score += vote

    return vote_score, max_score


def whats_the_ruling(strategy: DecisionStrategy, vote_score: int, max_score: int) -> bool:
    """Decide if access is allowed from the vote tally."""
    if strategy == DecisionStrategy.UNANIMOUS:
        return vote_score == max_score
    if strategy == DecisionStrategy.CONSENSUS:
        return vote_score > (max_score - vote_score)
    if strategy == DecisionStrategy.AFFIRMATIVE:
        return vote_score > 0
    return False


class AccessControl:
    """
    Decides whether a principal may access a request path.

    Paths that match no access rule, or whose rule requires no roles, are
    always allowed. Restricted paths are put to a vote among the injected
    voters followed by the built-in AuthenticationVoter and RoleVoter.
    """

    def __init__(
        self,
        principal: Principal,
        config: Union[AccessControlConfig, Mapping[str, Any], None] = None,
        voters: Optional[Sequence[Voter]] = None,
        role_hierarchy: Optional[RoleHierarchy] = None,
        path_matcher: Optional[PathMatcher] = None,
        metrics: Optional[DecisionMetrics] = None
    ):
        """
        Args:
            principal: The principal requesting access
            config: Access control configuration, or its raw mapping
            voters: Additional voters, polled before the built-in ones
            role_hierarchy: Hierarchy used by the built-in RoleVoter
            path_matcher: Matcher for rule patterns (defaults to the one
                named by the configuration)
            metrics: Optional decision metrics

        Raises:
            ConfigurationError: If the strategy or any rule is invalid.
        """
        if config is None or isinstance(config, Mapping):
            config = AccessControlConfig.from_dict(config)
        elif not isinstance(config, AccessControlConfig):
            raise ConfigurationError(
                f"Unsupported access control configuration type: {type(config).__name__}",
                config_key="AccessControl"
            )

        self._principal = principal
        self._config = config
        self._strategy = self._set_decision_strategy(config.decision_strategy)
        self._matcher = path_matcher or create_path_matcher(config.path_matcher)
        for rule in config.rules:
            self._matcher.validate(rule.path)

        self._voters: Tuple[Voter, ...] = tuple(voters or ()) + (
            AuthenticationVoter(),
            RoleVoter(role_hierarchy),
        )
        self._metrics = metrics

    @property
    def strategy(self) -> DecisionStrategy:
        return self._strategy

    @property
    def principal(self) -> Principal:
        return self._principal

    @property
    def voters(self) -> Tuple[Voter, ...]:
        return self._voters

    def is_allowed_access(self, path: Optional[str] = None) -> bool:
        """
        Check if the principal is allowed to access ``path``.

        Args:
            path: Request path; defaults to the path of the current request
                context.

        Returns:
            bool: True if access is allowed, otherwise False
        """
        return self.decide(path).allowed

    def decide(self, path: Optional[str] = None) -> Decision:
        """Like is_allowed_access, but returns the full decision."""
        path = self._resolve_path(path)
        rule = self._match_rule(path)
        requested_roles = list(rule.roles) if rule else []

        # access is allowed if there are no requested roles the principal must have
        if not requested_roles:
            return Decision(allowed=True, strategy=self._strategy, path=path, rule=rule)

        if self._metrics:
            with self._metrics.time_decision(self._strategy.value):
                decision = self._get_access_decision(path, rule, requested_roles)
            self._metrics.record_decision(self._strategy.value, decision.allowed)
        else:
            decision = self._get_access_decision(path, rule, requested_roles)

        if decision.allowed:
            logger.info(
                f"Access to {path} granted to {self._principal.kind} "
                f"({decision.vote_score}/{decision.max_score}, {self._strategy.value})"
            )
        else:
            logger.warning(
                f"Access to {path} denied to {self._principal.kind} "
                f"({decision.vote_score}/{decision.max_score}, {self._strategy.value})"
            )
        return decision

    def get_requested_roles(self, path: Optional[str] = None) -> List[Role]:
        """Return the roles required by the first rule matching ``path``."""
        rule = self._match_rule(self._resolve_path(path))
        return list(rule.roles) if rule else []

    def _match_rule(self, path: str) -> Optional[AccessRule]:
        for rule in self._config.rules:
            if self._matcher.matches(rule.path, path):
                return rule
        return None

    def _get_access_decision(self, path: str, rule: AccessRule,
                             requested_roles: List[Role]) -> Decision:
        kind = self._principal.kind
        votes = {}

        for voter in self._voters:
            if not voter.supports_principal_kind(kind):
                continue

            vote = voter.vote(self._principal, requested_roles)
            logger.debug(f"{voter.name} voted {vote} for {path}")
            votes[self._vote_key(voter, votes)] = vote
            if self._metrics:
                self._metrics.record_vote(voter.name, vote)

        vote_score, max_score = tally_votes(self._strategy, votes.values())

        return Decision(
            allowed=whats_the_ruling(self._strategy, vote_score, max_score),
            strategy=self._strategy,
            path=path,
            requested_roles=requested_roles,
            vote_score=vote_score,
            max_score=max_score,
            votes=votes,
            rule=rule
        )

    @staticmethod
    def _vote_key(voter: Voter, votes: Mapping[str, int]) -> str:
        key = voter.name
        n = 2
        while key in votes:
            key = f"{voter.name}#{n}"
            n += 1
        return key

    @staticmethod
    def _set_decision_strategy(strategy: Any) -> DecisionStrategy:
        try:
            strategy = DecisionStrategy.parse(strategy)
        except ConfigurationError as e:
            logger.error(e.message)
            raise
        logger.debug(f"Access control decision strategy: {strategy.value}")
        return strategy

    @staticmethod
    def _resolve_path(path: Optional[str]) -> str:
        if path is not None:
            return path

        path = get_current_path()
        if path is None:
            raise SecurityError("No request path given and no request context is bound")
        return path
