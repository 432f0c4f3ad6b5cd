"""Fernet encryption for Cafe24 tokens kept in the document store."""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken


class CredentialDecryptError(ValueError):
    """Raised when a stored token cannot be decrypted with the current secret."""


class TokenCipherService:
    """Encrypt and decrypt token strings using a key derived from a secret."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Token encryption secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        """
        Decrypt a stored token.

        A failure usually means TOKEN_ENCRYPTION_SECRET (or the client secret
        it falls back to) changed after the record was written.
        """
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise CredentialDecryptError(
                "Failed to decrypt stored Cafe24 token; check the encryption secret."
            ) from exc
        return plaintext.decode("utf-8")


__all__ = ["CredentialDecryptError", "TokenCipherService"]
