"""
Password hashing with passlib's bcrypt scheme.
"""

import secrets
import string

from passlib.context import CryptContext


class PasswordHasher:
    """Hashes and verifies user passwords."""

    def __init__(self, rounds: int = 10):
        self.context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        """Hash a plaintext password."""
        return self.context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        """Verify a plaintext password against a stored hash."""
        if not hashed:
            return False
        try:
            return self.context.verify(password, hashed)
        except ValueError:
            # Malformed or unknown hash format
            return False

    @staticmethod
    def generate_temporary_password(length: int = 12) -> str:
        """Random password containing letters and digits."""
        alphabet = string.ascii_letters + string.digits
        while True:
            password = "".join(secrets.choice(alphabet) for _ in range(length))
            if any(c.isdigit() for c in password) and any(c.isalpha() for c in password):
                return password
