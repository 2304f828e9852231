"""
Authentication types for gatekeeper: users and login objects.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..authz.types import Principal
from ..role import Role, normalize_roles


class User(Principal):
    """
    A user principal with directly granted roles.
    """

    def __init__(self, username: str = "", roles: Any = None,
                 authenticated: bool = True,
                 attributes: Optional[Dict[str, Any]] = None):
        """
        Args:
            username: Unique user name
            roles: Role name, list of role names or list of Role instances
            authenticated: False for anonymous users
            attributes: Extra provider specific data
        """
        self.username = username
        self._roles: List[Role] = normalize_roles(roles, config_key="roles")
        self._authenticated = authenticated
        self.attributes: Dict[str, Any] = dict(attributes or {})

    @classmethod
    def anonymous(cls) -> 'User':
        """Create an unauthenticated user with no roles."""
        return cls(username="anonymous", authenticated=False)

    def get_roles(self) -> List[Role]:
        return list(self._roles)

    def has_role(self, role: str) -> bool:
        return any(r.name == role for r in self._roles)

    def is_authenticated(self) -> bool:
        return self._authenticated

    def set_authenticated(self, authenticated: bool) -> None:
        self._authenticated = authenticated

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'username': self.username,
            'roles': [role.name for role in self._roles],
            'authenticated': self._authenticated,
            'attributes': self.attributes
        }

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(username={self.username!r}, "
                f"roles={[r.name for r in self._roles]!r}, "
                f"authenticated={self._authenticated})")


@dataclass
class Login:
    """
    Credentials collected by an authentication provider, to be validated by
    a user provider.
    """
    username: str = ""
    password: str = ""
    remember_me: bool = False
    redirect_url: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def set_attribute(self, name: str, value: Any) -> None:
        self.attributes[name] = value
