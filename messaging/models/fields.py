"""Custom model fields for the messaging app."""

from cryptography.fernet import InvalidToken
from django.db import models

from ..config import get_config
from ..utils.crypto import decrypt_value, encrypt_value


class EncryptedCharField(models.CharField):
    """CharField whose value is Fernet-encrypted in the database.

    A value that cannot be decrypted with the current key loads as ``None``,
    which callers treat as a missing credential.
    """

    description = "CharField that transparently encrypts and decrypts its values"

    def __init__(self, *args, **kwargs):
        # Fernet tokens are roughly 1.4x the plaintext plus a fixed overhead
        kwargs.setdefault("max_length", 1000)
        super().__init__(*args, **kwargs)

    def get_internal_type(self):
        return "CharField"

    def get_prep_value(self, value):
        value = super().get_prep_value(value)
        if not value or not get_config("ENCRYPTION_ENABLED"):
            return value
        return encrypt_value(value)

    def from_db_value(self, value, expression, connection):
        if not value or not get_config("ENCRYPTION_ENABLED"):
            return value
        try:
            return decrypt_value(value)
        except InvalidToken:
            return None
