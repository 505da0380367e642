"""
Authentication infrastructure module.
Handles JWT signing/validation, sessions, token revocation and authorization.
"""

from .token_codec import TokenCodec, TokenKind
from .passwords import PasswordHasher
from .sessions import SessionStore, ActiveSession
from .revocation import RevocationList
from .authenticator import Authenticator

__all__ = [
    "TokenCodec",
    "TokenKind",
    "PasswordHasher",
    "SessionStore",
    "ActiveSession",
    "RevocationList",
    "Authenticator",
]
