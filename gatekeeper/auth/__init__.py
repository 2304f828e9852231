"""
Package auth provides authentication collaborators for gatekeeper firewalls.

This package implements:
- User principals and login objects
- Password encoders
- Session stores (memory and Redis)
- The OAuth2 authorization code authentication provider
"""

from .types import (
    User,
    Login
)

from .encoder import (
    Encoder,
    Sha256Encoder,
    PlainEncoder,
    create_encoder
)

from .session import (
    SessionStore,
    MemorySessionStore,
    RedisSessionStore
)

from .oauth2 import (
    OAuth2Config,
    OAuth2Client,
    OAuth2Provider,
    EXIT_TRIGGER_REDIRECT,
    EXIT_TRIGGER_EXCEPTION
)

__all__ = [
    # Types
    'User',
    'Login',

    # Encoders
    'Encoder',
    'Sha256Encoder',
    'PlainEncoder',
    'create_encoder',

    # Sessions
    'SessionStore',
    'MemorySessionStore',
    'RedisSessionStore',

    # OAuth2
    'OAuth2Config',
    'OAuth2Client',
    'OAuth2Provider',
    'EXIT_TRIGGER_REDIRECT',
    'EXIT_TRIGGER_EXCEPTION',
]
