"""Fernet field encryption for wellness data at rest.

Signal metadata, forecast payloads and user profiles are encrypted before
they reach SQLite. Identifiers, timestamps and headline scores stay in the
clear so they can be indexed.
"""

from __future__ import annotations

import json
from typing import Any

from cryptography.fernet import Fernet, InvalidToken


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""


class FieldEncryptor:
    """Encrypts JSON-serializable values to Fernet tokens and back.

    Usage::

        encryptor = FieldEncryptor(key=FieldEncryptor.generate_key())
        token = encryptor.encrypt({"stressLevel": "high"})
        encryptor.decrypt(token)  # {"stressLevel": "high"}
    """

    def __init__(self, key: str) -> None:
        """
        Raises:
            EncryptionError: If the key is empty or not a valid Fernet key.
        """
        if not key or not key.strip():
            raise EncryptionError("Encryption key must not be empty")
        try:
            self._fernet = Fernet(key.encode("utf-8"))
        except (ValueError, TypeError) as exc:
            raise EncryptionError(f"Invalid encryption key: {exc}") from exc

    def encrypt(self, data: Any) -> str:
        """Encrypt a JSON-serializable value. ``None`` encrypts to ``""``."""
        if data is None:
            return ""
        try:
            plaintext = json.dumps(data, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"Encryption failed: {exc}") from exc
        return self._fernet.encrypt(plaintext).decode("utf-8")

    def decrypt(self, token: str) -> Any:
        """Decrypt a token produced by :meth:`encrypt`. ``""`` decrypts to ``None``."""
        if not token:
            return None
        try:
            plaintext = self._fernet.decrypt(token.encode("utf-8"))
        except InvalidToken as exc:
            raise EncryptionError("Decryption failed: invalid token or wrong key") from exc
        return json.loads(plaintext)

    @staticmethod
    def generate_key() -> str:
        return Fernet.generate_key().decode("utf-8")
