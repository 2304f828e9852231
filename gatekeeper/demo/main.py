"""
gatekeeper Demo Application

Shows an access decision for a user, a set of roles and a request path,
against either a configuration file or a built-in example configuration:

    gatekeeper-demo --firewall Admin --roles ROLE_EDITOR /admin/pages
    gatekeeper-demo --config security.yaml --anonymous /
"""

import argparse
import logging
import sys
from typing import List, Optional

from gatekeeper.auth.types import User
from gatekeeper.errors import GatekeeperError
from gatekeeper.role import role_names
from gatekeeper.security import Security


EXAMPLE_CONFIG = {
    'Security': {
        'Firewalls': {
            'Admin': {
                'Realm': 'Administration',
                'RoleHierarchy': {
                    'ROLE_SUPERADMIN': 'ROLE_ADMIN',
                    'ROLE_ADMIN': ['ROLE_EDITOR'],
                    'ROLE_EDITOR': ['ROLE_USER'],
                },
                'AccessControl': {
                    'DecisionStrategy': 'unanimous',
                    'Rules': [
                        {'Path': '^/admin/users', 'Roles': 'ROLE_ADMIN'},
                        {'Path': '^/admin', 'Roles': ['ROLE_EDITOR']},
                        {'Path': '^/account', 'Roles': 'ROLE_USER'},
                    ],
                },
            },
        },
    },
}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="gatekeeper-demo",
        description="Evaluate a gatekeeper access decision"
    )
    ap.add_argument("path", help="request path to check, e.g. /admin/users")
    ap.add_argument("--config", help="JSON or YAML security configuration file")
    ap.add_argument("--firewall", default="Admin")
    ap.add_argument("--user", default="demo")
    ap.add_argument("--roles", nargs="*", default=[])
    ap.add_argument("--anonymous", action="store_true",
                    help="evaluate as an unauthenticated user")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        if args.config:
            security = Security.from_file(args.config)
        else:
            security = Security.from_dict(EXAMPLE_CONFIG)
        firewall = security.firewall(args.firewall)
    except GatekeeperError as e:
        print(f"✗ {e}")
        return 2

    if args.anonymous:
        user = User.anonymous()
    else:
        user = User(args.user, roles=args.roles)

    decision = firewall.decide(user, args.path)

    print(f"Firewall:  {firewall.name} ({firewall.realm})")
    print(f"User:      {user.username} roles={role_names(user.get_roles())}")
    print(f"Path:      {decision.path}")
    if decision.rule is None:
        print("Rule:      none (unrestricted)")
    else:
        print(f"Rule:      {decision.rule.path} -> {role_names(decision.rule.roles)}")
        print(f"Strategy:  {decision.strategy.value}")
        for voter, vote in decision.votes.items():
            print(f"  {voter}: {vote:+d}")
        print(f"Score:     {decision.vote_score}/{decision.max_score}")
    print(f"Decision:  {'✓ allowed' if decision.allowed else '✗ denied'}")

    return 0 if decision.allowed else 1


if __name__ == "__main__":
    sys.exit(main())
