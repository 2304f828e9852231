"""
Password encoders for gatekeeper firewalls.
"""

from abc import ABC, abstractmethod
import hashlib
import hmac
import logging
import secrets

from ..errors import ConfigurationError


logger = logging.getLogger(__name__)


class Encoder(ABC):
    """Creates and verifies password hashes."""

    @abstractmethod
    def create_password_hash(self, password: str) -> str:
        """Create a hash for the given password."""
        pass

    @abstractmethod
    def verify_password_hash(self, password: str, password_hash: str) -> bool:
        """Verify if the password matches the hash."""
        pass


class Sha256Encoder(Encoder):
    """
    Salted SHA-256 password hashes in the form ``sha256$<salt>$<hexdigest>``.
    """

    prefix = "sha256"

    def __init__(self, salt_bytes: int = 16):
        self.salt_bytes = salt_bytes

    def create_password_hash(self, password: str) -> str:
        salt = secrets.token_hex(self.salt_bytes)
        return f"{self.prefix}${salt}${self._digest(salt, password)}"

    def verify_password_hash(self, password: str, password_hash: str) -> bool:
        try:
            prefix, salt, digest = password_hash.split('$', 2)
        except ValueError:
            logger.debug("Malformed password hash")
            return False
        if prefix != self.prefix:
            return False
        return hmac.compare_digest(self._digest(salt, password), digest)

    @staticmethod
    def _digest(salt: str, password: str) -> str:
        return hashlib.sha256(f"{salt}{password}".encode('utf-8')).hexdigest()


class PlainEncoder(Encoder):
    """Stores passwords as-is. Only for development and tests."""

    def create_password_hash(self, password: str) -> str:
        return password

    def verify_password_hash(self, password: str, password_hash: str) -> bool:
        return hmac.compare_digest(password.encode('utf-8'), password_hash.encode('utf-8'))


def create_encoder(encoder_type: str = "sha256", **kwargs) -> Encoder:
    """
    Factory function to create password encoders

    Args:
        encoder_type: Type of encoder ("sha256" or "plain")
        **kwargs: Additional arguments for the encoder

    Returns:
        Encoder instance
    """
    if encoder_type == "sha256":
        return Sha256Encoder(**kwargs)
    elif encoder_type == "plain":
        return PlainEncoder()
    else:
        raise ConfigurationError(
            f"Unknown password encoder: {encoder_type}",
            config_key="Encoder",
            config_value=encoder_type
        )
