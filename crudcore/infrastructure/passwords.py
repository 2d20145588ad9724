"""Password Hashing — bcrypt hash/verify for member credentials.

Invariants:
    - Only bcrypt hashes are stored; plain passwords never leave the provider call
    - verify_password returns False (never raises) for malformed hashes
    - Passwords longer than BCRYPT_MAX_BYTES UTF-8 bytes are rejected by
      JoinRequest before they reach hash_password
"""

import bcrypt

BCRYPT_MAX_BYTES = 72


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
