"""
Package authz implements the voting access control for gatekeeper.

Access rules map request paths to required roles. For a restricted path every
applicable voter casts a vote and the configured decision strategy turns the
votes into a ruling:
  - unanimous:   a single deny vote denies access
  - affirmative: a single grant vote grants access
  - consensus:   the majority wins
"""

from .types import (
    ACCESS_GRANTED,
    ACCESS_ABSTAIN,
    ACCESS_DENIED,
    DecisionStrategy,
    Principal,
    AccessRule,
    Decision
)

from .voters import (
    Voter,
    AuthenticationVoter,
    RoleVoter
)

from .config import AccessControlConfig

from .matcher import (
    PathMatcher,
    RegexPathMatcher,
    GlobPathMatcher,
    create_path_matcher
)

from .context import (
    RequestContext,
    get_request_context,
    get_current_path,
    request_scope
)

from .access_control import (
    AccessControl,
    tally_votes,
    whats_the_ruling
)

__all__ = [
    # Types
    'ACCESS_GRANTED',
    'ACCESS_ABSTAIN',
    'ACCESS_DENIED',
    'DecisionStrategy',
    'Principal',
    'AccessRule',
    'Decision',

    # Voters
    'Voter',
    'AuthenticationVoter',
    'RoleVoter',

    # Configuration
    'AccessControlConfig',

    # Path matching
    'PathMatcher',
    'RegexPathMatcher',
    'GlobPathMatcher',
    'create_path_matcher',

    # Context
    'RequestContext',
    'get_request_context',
    'get_current_path',
    'request_scope',

    # Decision
    'AccessControl',
    'tally_votes',
    'whats_the_ruling'
]
