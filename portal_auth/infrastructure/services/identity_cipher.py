"""
===============================================================================
CRC CARD — infrastructure/services/identity_cipher.py
===============================================================================

Classes:
    - DeterministicIdentityCipher (AES-128-ECB/PKCS7, MySQL AES_ENCRYPT compatible)
    - KeyedIdentityCipher (Fernet + HMAC-SHA256 blind index)

Responsibilities:
    - Encrypt usernames before they reach the store.
    - Decrypt stored usernames for listing and equality checks.
    - Produce a lookup key so stores can narrow candidates by index.

Collaborators:
    - cryptography (hazmat ciphers, Fernet, HKDF)
    - infrastructure/repositories/* (persist ciphertext + lookup key)

Notes:
    - Deterministic mode leaks equality: equal usernames give equal
      ciphertexts. Its lookup key is the ciphertext itself.
    - Keyed mode uses randomized ciphertexts; equality goes through an HMAC
      of the username under a key derived from the store-wide key.
===============================================================================
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from typing import Protocol

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ...crosscutting.logger import logger

_AES_BLOCK_BITS = 128
_AES_KEY_BYTES = 16


class IdentityDecryptionError(ValueError):
    """Stored identity could not be decrypted (wrong key or corrupted data)."""


class IdentityCipher(Protocol):
    mode: str

    def encrypt(self, identity: str) -> bytes: ...

    def decrypt(self, ciphertext: bytes) -> str: ...

    def lookup_key(self, identity: str) -> bytes: ...


def _fold_key(key: bytes) -> bytes:
    """Fold an arbitrary-length key into 16 bytes by XOR, as MySQL does."""
    folded = bytearray(_AES_KEY_BYTES)
    for i, byte in enumerate(key):
        folded[i % _AES_KEY_BYTES] ^= byte
    return bytes(folded)


def _require_key(key: str) -> bytes:
    if not key:
        raise ValueError("identity encryption key is required")
    return key.encode("utf-8")


class DeterministicIdentityCipher:
    """Same plaintext + same key -> same ciphertext."""

    mode = "deterministic"

    def __init__(self, key: str) -> None:
        self._key = _fold_key(_require_key(key))

    def _cipher(self) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.ECB())

    def encrypt(self, identity: str) -> bytes:
        padder = padding.PKCS7(_AES_BLOCK_BITS).padder()
        data = padder.update(identity.encode("utf-8")) + padder.finalize()
        encryptor = self._cipher().encryptor()
        return encryptor.update(data) + encryptor.finalize()

    def decrypt(self, ciphertext: bytes) -> str:
        try:
            decryptor = self._cipher().decryptor()
            data = decryptor.update(bytes(ciphertext)) + decryptor.finalize()
            unpadder = padding.PKCS7(_AES_BLOCK_BITS).unpadder()
            plain = unpadder.update(data) + unpadder.finalize()
            return plain.decode("utf-8")
        except (ValueError, UnicodeDecodeError) as exc:
            raise IdentityDecryptionError("Failed to decrypt identity") from exc

    def lookup_key(self, identity: str) -> bytes:
        return self.encrypt(identity)


class KeyedIdentityCipher:
    """Randomized Fernet ciphertext plus an HMAC blind index for lookups."""

    mode = "keyed"

    def __init__(self, key: str) -> None:
        raw = _require_key(key)
        enc_key = self._derive(raw, b"portal-auth identity encryption")
        self._fernet = Fernet(base64.urlsafe_b64encode(enc_key))
        self._index_key = self._derive(raw, b"portal-auth identity index")

    @staticmethod
    def _derive(raw: bytes, info: bytes) -> bytes:
        return HKDF(algorithm=hashes.SHA256(), length=32, salt=None, info=info).derive(
            raw
        )

    def encrypt(self, identity: str) -> bytes:
        return self._fernet.encrypt(identity.encode("utf-8"))

    def decrypt(self, ciphertext: bytes) -> str:
        try:
            return self._fernet.decrypt(bytes(ciphertext)).decode("utf-8")
        except (InvalidToken, UnicodeDecodeError) as exc:
            logger.error("identity decryption failed (invalid key or corrupted data)")
            raise IdentityDecryptionError("Failed to decrypt identity") from exc

    def lookup_key(self, identity: str) -> bytes:
        return hmac.new(
            self._index_key, identity.encode("utf-8"), hashlib.sha256
        ).digest()


def build_identity_cipher(mode: str, key: str) -> IdentityCipher:
    """Factory for the configured IDENTITY_CIPHER_MODE."""
    normalized = (mode or "deterministic").strip().lower()
    if normalized == "deterministic":
        return DeterministicIdentityCipher(key)
    if normalized == "keyed":
        return KeyedIdentityCipher(key)
    raise ValueError(f"Unknown identity cipher mode: {mode}")
