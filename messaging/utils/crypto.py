"""
Cryptography utilities for the messaging app.

Provider tokens are encrypted at rest with Fernet using a PBKDF2-derived key.
"""

import base64
import hashlib
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from django.conf import settings

from mailsync_core.utils.logging import ContextLogger

from ..config import get_config

logger = ContextLogger(__name__)


def derive_key(secret: bytes, salt: bytes) -> bytes:
    """Derive a 32-byte key from ``secret`` and ``salt`` with PBKDF2-SHA256."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=100000,
    )
    return kdf.derive(secret)


@lru_cache(maxsize=8)
def _fernet_for(secret: str, salt: str) -> Fernet:
    key = derive_key(secret.encode("utf-8"), salt.encode("utf-8"))
    return Fernet(base64.urlsafe_b64encode(key))


def get_fernet() -> Fernet:
    """Return the Fernet instance for the configured key and salt.

    Without explicit configuration both are derived from ``SECRET_KEY`` so
    encrypted values stay readable across processes.
    """
    secret = get_config("ENCRYPTION_KEY") or settings.SECRET_KEY
    salt = get_config("ENCRYPTION_SALT")
    if not salt:
        salt = hashlib.sha256(f"salt:{settings.SECRET_KEY}".encode()).hexdigest()
    return _fernet_for(secret, salt)


def encrypt_value(value):
    """Encrypt a string value, returning ``None`` for empty input."""
    if not value:
        return None
    return get_fernet().encrypt(value.encode("utf-8")).decode("utf-8")


def decrypt_value(encrypted_value):
    """Decrypt a value produced by ``encrypt_value``.

    Raises:
        InvalidToken: If the value was not encrypted with the current key
    """
    if not encrypted_value:
        return None
    try:
        return get_fernet().decrypt(encrypted_value.encode("utf-8")).decode("utf-8")
    except InvalidToken:
        logger.error("Decryption failed: token does not match the configured key")
        raise
