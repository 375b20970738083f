from .repositories import CredentialStore

__all__ = ["CredentialStore"]
