"""Credential lifecycle errors.

All of these are fatal to the credential request that raised them; nothing
in the auth package retries.
"""


class AuthError(Exception):
    """Base class for credential acquisition failures."""


class ListenerStartupError(AuthError):
    """Raised when the local callback listener cannot be bound."""


class CallbackError(AuthError):
    """Raised when the authorization callback carries no usable code."""


class AuthorizationCancelled(AuthError):
    """Raised when the caller cancels while waiting for the callback."""


class AuthorizationTimeout(AuthError):
    """Raised when no callback arrives before the deadline."""


class TokenExchangeError(AuthError):
    """Raised when the authorization code cannot be exchanged for a token."""


class TokenRefreshError(AuthError):
    """Raised when an expired access token cannot be refreshed."""
