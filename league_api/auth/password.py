"""
Password hashing and verification utilities.

Uses bcrypt with a configurable work factor (BCRYPT_WORK_FACTOR, default 12).
"""

import bcrypt

from league_api import config


def hash_password(password: str) -> str:
    """Hash a password using bcrypt and return it as a string for storage."""
    salt = bcrypt.gensalt(rounds=config.BCRYPT_WORK_FACTOR)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against its hash.

    Returns False for malformed hashes instead of raising.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False
