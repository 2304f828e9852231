"""
Basic gatekeeper usage example.

This example demonstrates the fundamental gatekeeper operations:
- Building a Security instance from configuration
- Checking access with the role hierarchy
- Binding the request path with request_scope
- Adding a custom voter
- Starting an OAuth2 login
"""

import asyncio

from gatekeeper import Security, User, Voter, request_scope
from gatekeeper.auth import MemorySessionStore, OAuth2Client, OAuth2Config, OAuth2Provider
from gatekeeper.authz import ACCESS_ABSTAIN, ACCESS_DENIED
from gatekeeper.errors import GatekeeperError


CONFIG = {
    "Firewalls": {
        "Admin": {
            "Realm": "Administration",
            "RoleHierarchy": {
                "ROLE_ADMIN": "ROLE_EDITOR",
                "ROLE_EDITOR": ["ROLE_USER"],
            },
            "AccessControl": {
                "DecisionStrategy": "unanimous",
                "Rules": [
                    {"Path": "^/admin/users", "Roles": "ROLE_ADMIN"},
                    {"Path": "^/admin", "Roles": "ROLE_EDITOR"},
                ],
            },
        },
    },
}


class BlockedUserVoter(Voter):
    """Denies access to users on a block list"""

    def __init__(self, blocked):
        self.blocked = set(blocked)

    def vote(self, principal, requested_roles):
        if getattr(principal, "username", None) in self.blocked:
            return ACCESS_DENIED
        return ACCESS_ABSTAIN


def access_example():
    """Demonstrate access decisions"""
    print("Basic gatekeeper Example")
    print("=" * 30)

    # 1. Create security
    security = Security.from_dict(CONFIG)
    firewall = security.firewall("Admin")
    print(f"✓ Created firewall: {firewall.name}")

    admin = User("alice", roles="ROLE_ADMIN")
    editor = User("bob", roles="ROLE_EDITOR")

    # 2. Check access with explicit paths
    for user in (admin, editor, User.anonymous()):
        for path in ("/admin/users", "/admin/pages", "/"):
            allowed = firewall.is_user_allowed_access(user, path)
            print(f"{'✓' if allowed else '✗'} {user.username} -> {path}")

    # 3. Check access for the current request
    with request_scope("/admin/pages", method="GET"):
        print(f"✓ In request scope, bob allowed: {firewall.is_user_allowed_access(editor)}")

    # 4. Add a custom voter
    firewall.add_voter(BlockedUserVoter(["bob"]))
    decision = firewall.decide(editor, "/admin/pages")
    print(f"✓ After blocking bob: allowed={decision.allowed} votes={decision.votes}")


async def oauth2_example():
    """Demonstrate the start of an OAuth2 login"""
    client = OAuth2Client(OAuth2Config(
        authorization_endpoint="https://auth.example.com/authorize",
        token_endpoint="https://auth.example.com/token",
        client_id="example-client",
        client_secret="example-secret",
        scopes=["profile"],
    ))
    provider = OAuth2Provider(client, MemorySessionStore(), roles="ROLE_USER")

    login = await provider.get_login_object({})
    print(f"✓ Redirect user agent to: {login.redirect_url}")


if __name__ == "__main__":
    try:
        access_example()
        asyncio.run(oauth2_example())
    except GatekeeperError as e:
        print(f"✗ {e}")
