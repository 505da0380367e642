"""
JWT token codec.
Signs and verifies the access/refresh token pair with a single shared secret.
"""

import secrets
import time
from enum import Enum
from typing import Optional, Dict, Any

from jose import JWTError, jwt as jose_jwt

from claimflow.config import Settings

REGISTERED_CLAIMS = ("iat", "exp", "jti")


class TokenKind(str, Enum):
    """Token flavours; they differ only in lifetime."""
    ACCESS = "access"
    REFRESH = "refresh"


class TokenCodec:
    """Handles JWT signing and validation."""

    def __init__(self, settings: Settings):
        self.jwt_secret = settings.jwt_secret_key
        self.jwt_algorithm = settings.jwt_algorithm
        self.lifetimes = {
            TokenKind.ACCESS: settings.access_token_ttl_seconds,
            TokenKind.REFRESH: settings.refresh_token_ttl_seconds,
        }

    def lifetime(self, kind: TokenKind) -> int:
        return self.lifetimes[kind]

    def sign(
        self,
        payload: Dict[str, Any],
        kind: TokenKind,
        expires_in: Optional[int] = None
    ) -> str:
        """
        Sign a payload.

        Args:
            payload: Application claims ({id, role} for access, {id} for refresh)
            kind: Token kind, selects the default lifetime
            expires_in: Lifetime override in seconds

        Returns:
            JWT token string
        """
        now = int(time.time())
        lifetime = self.lifetimes[kind] if expires_in is None else expires_in

        claims = dict(payload)
        claims.update({
            "iat": now,
            "exp": now + lifetime,
            # Two tokens minted in the same second must still differ
            "jti": secrets.token_hex(16),
        })

        return jose_jwt.encode(claims, self.jwt_secret, algorithm=self.jwt_algorithm)

    def _decode(self, token: str, verify_exp: bool = True) -> Optional[Dict[str, Any]]:
        if not token:
            return None
        try:
            return jose_jwt.decode(
                token,
                self.jwt_secret,
                algorithms=[self.jwt_algorithm],
                options={"verify_exp": verify_exp, "verify_aud": False}
            )
        except JWTError:
            return None

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Verify a token.

        Args:
            token: JWT token string

        Returns:
            The signed payload without registered claims, or None when the token
            is malformed, tampered with or expired
        """
        claims = self._decode(token)
        if claims is None or "exp" not in claims:
            return None
        return {key: value for key, value in claims.items() if key not in REGISTERED_CLAIMS}

    def remaining_lifetime(self, token: str) -> int:
        """Seconds until the token expires; 0 for invalid or expired tokens."""
        claims = self._decode(token, verify_exp=False)
        if not claims or "exp" not in claims:
            return 0
        return max(0, int(claims["exp"]) - int(time.time()))
