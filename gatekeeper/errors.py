"""
Error types and error codes for the gatekeeper package.
Provides structured error handling across all subpackages.
"""

from enum import Enum
from typing import Dict, Any, Optional


class ErrorCode(str, Enum):
    """Standard error codes used across gatekeeper."""
    CONFIGURATION_ERROR = "configuration_error"
    SECURITY_VIOLATION = "security_violation"
    TOKEN_ERROR = "token_error"
    OAUTH2_ERROR = "oauth2_error"
    HTTP_ERROR = "http_error"
    INTERNAL_ERROR = "internal_error"

    def __str__(self) -> str:
        return self.value


# Error code constants for easy import
CONFIGURATION_ERROR = ErrorCode.CONFIGURATION_ERROR
SECURITY_VIOLATION = ErrorCode.SECURITY_VIOLATION
TOKEN_ERROR = ErrorCode.TOKEN_ERROR
OAUTH2_ERROR = ErrorCode.OAUTH2_ERROR
HTTP_ERROR = ErrorCode.HTTP_ERROR
INTERNAL_ERROR = ErrorCode.INTERNAL_ERROR


class GatekeeperError(Exception):
    """Base exception for all gatekeeper errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            'error': self.error_code.value,
            'message': self.message,
            'details': self.details
        }

        if self.cause:
            result['cause'] = str(self.cause)

        return result

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class ConfigurationError(GatekeeperError):
    """Raised when the security configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, CONFIGURATION_ERROR, details)
        self.config_key = config_key
        self.config_value = config_value

        if config_key:
            self.details['config_key'] = config_key
        if config_value is not None:
            self.details['config_value'] = str(config_value)


class SecurityError(GatekeeperError):
    """Raised for security component failures, e.g. an undefined firewall."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, SECURITY_VIOLATION, details, cause)


class TokenError(GatekeeperError):
    """Raised when an authentication token cannot be handled."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, TOKEN_ERROR, details, cause)


class OAuth2Error(GatekeeperError):
    """Raised by the OAuth2 authentication provider."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, OAUTH2_ERROR, details, cause)


class OAuth2Redirect(OAuth2Error):
    """
    Signals that the user agent must be sent to the authorization server.

    Raised by the OAuth2 provider when its exit trigger is "exception".
    """

    def __init__(self, url: str):
        super().__init__("Redirecting", details={'location': url})
        self.url = url


class HttpError(GatekeeperError):
    """Raised when an HTTP exchange with an external provider fails."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, HTTP_ERROR, details, cause)
        self.status = status

        if status is not None:
            self.details['status'] = status
