"""
Path matchers used to test access rule patterns against the request path.
"""

from abc import ABC, abstractmethod
from fnmatch import fnmatchcase
from functools import lru_cache
import re

from ..errors import ConfigurationError


class PathMatcher(ABC):
    """Decides whether an access rule pattern matches a request path."""

    @abstractmethod
    def matches(self, pattern: str, path: str) -> bool:
        pass

    def validate(self, pattern: str) -> None:
        """
        Check that a pattern is usable by this matcher.

        Raises:
            ConfigurationError: If the pattern is invalid.
        """


class RegexPathMatcher(PathMatcher):
    """
    Regular expression matching; the pattern may match anywhere in the path,
    so anchor it with ``^`` to match path prefixes.
    """

    def matches(self, pattern: str, path: str) -> bool:
        return _compile(pattern).search(path) is not None

    def validate(self, pattern: str) -> None:
        try:
            _compile(pattern)
        except re.error as e:
            raise ConfigurationError(
                f"Invalid access rule path pattern {pattern!r}: {e}",
                config_key="Rules.Path",
                config_value=pattern
            )


class GlobPathMatcher(PathMatcher):
    """Shell-style wildcard matching against the whole path."""

    def matches(self, pattern: str, path: str) -> bool:
        return fnmatchcase(path, pattern)


@lru_cache(maxsize=256)
def _compile(pattern: str) -> 're.Pattern':
    return re.compile(pattern)


def create_path_matcher(matcher_type: str = "regex") -> PathMatcher:
    """
    Factory function to create path matchers.

    Args:
        matcher_type: Type of matcher ("regex" or "glob")

    Returns:
        PathMatcher instance
    """
    if matcher_type == "regex":
        return RegexPathMatcher()
    elif matcher_type == "glob":
        return GlobPathMatcher()
    else:
        raise ConfigurationError(
            f"Unknown path matcher type: {matcher_type}",
            config_key="PathMatcher",
            config_value=matcher_type
        )
