"""
Name: Repository Interfaces (Ports)

Responsibilities:
  - Define the credential store contract used by the identity core
  - Keep login, authorization and user management independent from Postgres

Collaborators:
  - identity/authenticator.py
  - application/usecases/users
  - infrastructure/repositories (Postgres + in-memory implementations)

Constraints:
  - Identities are plaintext at this boundary; implementations encrypt them
  - "Not found" is None/False, never an exception
  - Duplicate identities raise DuplicateIdentityError
  - Any other store failure raises DatabaseError
"""

from __future__ import annotations

from typing import Protocol

from ..identity.users import User, UserRole


class CredentialStore(Protocol):
    """
    R: Persistent set of credential records.

    Implementations:
      - PostgresCredentialStore (production)
      - InMemoryCredentialStore (tests / local)
    """

    def find_by_identity(self, identity: str) -> User | None:
        """R: Record whose decrypted identity equals `identity`."""
        ...

    def get_by_id(self, user_id: int) -> User | None: ...

    def create(self, identity: str, password_hash: str, role: UserRole) -> User:
        """
        R: Insert a record.

        Raises:
            DuplicateIdentityError: identity already taken
        """
        ...

    def update_identity(self, user_id: int, new_identity: str) -> User | None:
        """R: None when the id does not exist."""
        ...

    def update_secret(self, user_id: int, password_hash: str) -> User | None: ...

    def delete(self, user_id: int) -> bool:
        """R: False when the id does not exist."""
        ...

    def list(self) -> list[User]:
        """R: All records, newest first (created_at DESC, id DESC)."""
        ...

    def ping(self) -> bool: ...
