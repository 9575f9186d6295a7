"""Password hashing and generation."""
import secrets
import string
from typing import Optional

from werkzeug.security import generate_password_hash, check_password_hash

SYMBOLS = '!@#$%^&*()_+-=[]{}|;:,.<>?'
GENERATED_PASSWORD_LENGTH = 12


class PasswordHasher:
    """Slow, salted one-way hashing with a configurable method/cost."""

    def __init__(self, method: str = 'scrypt'):
        self.method = method
        # Compared against when no principal exists so both paths cost the same
        self._dummy_hash = generate_password_hash(secrets.token_hex(16), method=method)

    def hash(self, password: str) -> str:
        """Hash a plain text password."""
        return generate_password_hash(password, method=self.method)

    def verify(self, password_hash: Optional[str], password: str) -> bool:
        """Check a password; a missing hash still burns one comparison."""
        if not password_hash:
            check_password_hash(self._dummy_hash, password if isinstance(password, str) else '')
            return False
        if not isinstance(password, str):
            return False
        try:
            return check_password_hash(password_hash, password)
        except ValueError:
            # Unknown hash method stored in the row
            return False

    @staticmethod
    def generate(length: int = GENERATED_PASSWORD_LENGTH) -> str:
        """Random password with at least one symbol, digit, upper and lower char."""
        length = max(length, 6)
        pools = [SYMBOLS, string.digits, string.ascii_uppercase, string.ascii_lowercase]
        chars = [secrets.choice(pool) for pool in pools]
        everything = ''.join(pools)
        chars += [secrets.choice(everything) for _ in range(length - len(chars))]
        secrets.SystemRandom().shuffle(chars)
        return ''.join(chars)
