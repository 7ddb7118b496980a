"""
Password hashing for locally stored accounts.
"""
import hashlib
import hmac
import secrets
from typing import Optional, Tuple


def hash_password(password: str, salt: Optional[str] = None) -> Tuple[str, str]:
    """
    Hash a password with a random (or the given) salt.

    Returns:
        (hash, salt), both hex encoded
    """
    if salt is None:
        salt = secrets.token_hex(32)
    digest = hashlib.sha256(password.encode("utf-8") + bytes.fromhex(salt)).hexdigest()
    return digest, salt


def verify_password(password: str, password_hash: Optional[str], salt: Optional[str]) -> bool:
    """Check a password against a stored hash. Accounts without a password never match."""
    if password_hash is None or salt is None:
        return False
    candidate, _ = hash_password(password, salt)
    return hmac.compare_digest(candidate, password_hash)
