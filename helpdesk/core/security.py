# helpdesk/core/security.py
import hashlib
import secrets

from passlib.context import CryptContext

from helpdesk.core.config import settings

# 1. Configuration
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# 2. Password Handling
def _pre_hash_password(password: str) -> str:
    """
    Handle the 'bcrypt 72-byte limit' safely.
    Passwords longer than 72 bytes are SHA-256 hashed first so every byte
    still matters. The 64-char hexdigest fits inside bcrypt's limit.
    """
    if len(password.encode("utf-8")) <= 72:
        return password

    return hashlib.sha256(password.encode("utf-8")).hexdigest()

def hash_password(password: str) -> str:
    safe_password = _pre_hash_password(password)
    return pwd_context.hash(safe_password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    safe_password = _pre_hash_password(plain_password)
    return pwd_context.verify(safe_password, hashed_password)

# 3. Dummy hash for unknown usernames
# Generated with the same context (and cost factor) as real hashes, so comparing
# against it costs the same as comparing against a stored password.
DUMMY_HASH = hash_password(secrets.token_urlsafe(32))
