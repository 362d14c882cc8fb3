"""Password hashing with bcrypt.

Hashing is only ever applied to a fresh plaintext supplied by a caller.
Stored hashes are passed through untouched; nothing here tries to guess
whether a value is already hashed.
"""

import os

import bcrypt

# 2^12 iterations. Tests may lower this; production should stay in 10-12.
BCRYPT_ROUNDS = int(os.getenv('BCRYPT_ROUNDS', '12'))

# bcrypt ignores everything past 72 bytes
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a plaintext password with a fresh salt."""
    if not password:
        raise ValueError("Cannot hash an empty password")
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Check a plaintext password against a stored bcrypt hash.

    Returns False for a missing or malformed hash instead of raising.
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError:
        return False
