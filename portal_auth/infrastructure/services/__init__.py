from .identity_cipher import (
    DeterministicIdentityCipher,
    IdentityCipher,
    IdentityDecryptionError,
    KeyedIdentityCipher,
    build_identity_cipher,
)

__all__ = [
    "IdentityCipher",
    "IdentityDecryptionError",
    "DeterministicIdentityCipher",
    "KeyedIdentityCipher",
    "build_identity_cipher",
]
