"""
Password hashing and one-time token helpers
"""

import hashlib
import logging
import secrets

from passlib.context import CryptContext

logger = logging.getLogger(__name__)

# pbkdf2 keeps passlib independent of the bcrypt C extension
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against stored hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


def generate_secure_token(length: int = 32) -> str:
    """Generate a cryptographically secure random token"""
    return secrets.token_urlsafe(length)


def hash_token(token: str) -> str:
    """One-way hash for tokens stored at rest (password reset links)"""
    return hashlib.sha256(token.encode()).hexdigest()
