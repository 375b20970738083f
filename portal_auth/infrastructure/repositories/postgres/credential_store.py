"""
============================================================
CRC CARD — infrastructure/repositories/postgres/credential_store.py
============================================================
Class: PostgresCredentialStore

Responsibilities:
  - Persist credential records in the `users` table with the identity
    encrypted (identity_ciphertext) and indexed (identity_lookup).
  - Look up by identity: narrow by lookup key, then decrypt-compare.
  - Create / update identity / update secret / delete / list (newest first).
  - Map UniqueViolation -> DuplicateIdentityError and every other failure
    -> DatabaseError with structured logging.

Collaborators:
  - infrastructure.db.InstrumentedConnectionPool (injected)
  - infrastructure.services.identity_cipher.IdentityCipher
  - identity.users.User / UserRole
  - crosscutting.logger / crosscutting.exceptions.DatabaseError

Constraints / Notes:
  - Pure repository: no role policy, no password rules.
  - "Not found" is None / False, never an exception.
  - Parameterized SQL only.
  - Plaintext identities are never logged.
============================================================
"""

from __future__ import annotations

from typing import Iterable

from psycopg import errors as pg_errors

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger
from ....identity.errors import DuplicateIdentityError
from ....identity.users import User, UserRole
from ...services.identity_cipher import IdentityCipher, IdentityDecryptionError


class PostgresCredentialStore:
    """R: PostgreSQL implementation of CredentialStore."""

    # R: Explicit column list keeps the mapping in sync with migrations.
    _SELECT_COLUMNS = "id, identity_ciphertext, password_hash, role, created_at"

    # R: Newest first; id breaks created_at ties.
    _ORDER_BY = "ORDER BY created_at DESC, id DESC"

    def __init__(self, pool, cipher: IdentityCipher) -> None:
        self._pool = pool
        self._cipher = cipher

    # =========================================================
    # Mapping
    # =========================================================
    def _row_to_user(self, row: tuple) -> User:
        """
        Raises:
            IdentityDecryptionError: ciphertext does not decrypt under the key
            DatabaseError: role outside UserRole
        """
        user_id, ciphertext, password_hash, role, created_at = row
        parsed_role = UserRole.parse(role)
        if parsed_role is None:
            raise DatabaseError(f"Invalid user role in database for id={user_id}")
        return User(
            id=user_id,
            identity=self._cipher.decrypt(ciphertext),
            password_hash=password_hash,
            role=parsed_role,
            created_at=created_at,
        )

    def _to_user(self, row: tuple) -> User:
        try:
            return self._row_to_user(row)
        except IdentityDecryptionError as exc:
            raise DatabaseError(
                f"Undecryptable identity for id={row[0]}", original_error=exc
            ) from exc

    # =========================================================
    # Execution helpers
    # =========================================================
    def _fetchone(
        self, *, query: str, params: Iterable[object], context_msg: str, extra: dict
    ) -> tuple | None:
        try:
            with self._pool.connection() as conn:
                return conn.execute(query, tuple(params)).fetchone()
        except pg_errors.UniqueViolation as exc:
            logger.info(context_msg, extra={**extra, "reason": "duplicate identity"})
            raise DuplicateIdentityError() from exc
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}", original_error=exc) from exc

    def _fetchall(
        self,
        *,
        query: str,
        params: Iterable[object] = (),
        context_msg: str,
        extra: dict,
    ) -> list[tuple]:
        try:
            with self._pool.connection() as conn:
                return conn.execute(query, tuple(params)).fetchall()
        except Exception as exc:
            logger.exception(context_msg, extra={**extra, "error": str(exc)})
            raise DatabaseError(f"{context_msg}: {exc}", original_error=exc) from exc

    # =========================================================
    # CredentialStore API
    # =========================================================
    def find_by_identity(self, identity: str) -> User | None:
        rows = self._fetchall(
            query=f"""
                SELECT {self._SELECT_COLUMNS}
                FROM users
                WHERE identity_lookup = %s
            """,
            params=(self._cipher.lookup_key(identity),),
            context_msg="PostgresCredentialStore: find_by_identity failed",
            extra={},
        )
        for row in rows:
            try:
                user = self._row_to_user(row)
            except IdentityDecryptionError:
                logger.warning(
                    "PostgresCredentialStore: skipping undecryptable identity",
                    extra={"user_id": row[0]},
                )
                continue
            if user.identity == identity:
                return user
        return None

    def get_by_id(self, user_id: int) -> User | None:
        row = self._fetchone(
            query=f"""
                SELECT {self._SELECT_COLUMNS}
                FROM users
                WHERE id = %s
            """,
            params=(user_id,),
            context_msg="PostgresCredentialStore: get_by_id failed",
            extra={"user_id": user_id},
        )
        return self._to_user(row) if row else None

    def create(self, identity: str, password_hash: str, role: UserRole) -> User:
        row = self._fetchone(
            query=f"""
                INSERT INTO users (identity_ciphertext, identity_lookup, password_hash, role)
                VALUES (%s, %s, %s, %s)
                RETURNING {self._SELECT_COLUMNS}
            """,
            params=(
                self._cipher.encrypt(identity),
                self._cipher.lookup_key(identity),
                password_hash,
                UserRole(role).value,
            ),
            context_msg="PostgresCredentialStore: create failed",
            extra={"role": UserRole(role).value},
        )
        if row is None:
            raise DatabaseError("PostgresCredentialStore: create returned no row")
        user = self._to_user(row)
        logger.info(
            "PostgresCredentialStore: user created",
            extra={"user_id": user.id, "role": user.role.value},
        )
        return user

    def update_identity(self, user_id: int, new_identity: str) -> User | None:
        row = self._fetchone(
            query=f"""
                UPDATE users
                SET identity_ciphertext = %s, identity_lookup = %s
                WHERE id = %s
                RETURNING {self._SELECT_COLUMNS}
            """,
            params=(
                self._cipher.encrypt(new_identity),
                self._cipher.lookup_key(new_identity),
                user_id,
            ),
            context_msg="PostgresCredentialStore: update_identity failed",
            extra={"user_id": user_id},
        )
        return self._to_user(row) if row else None

    def update_secret(self, user_id: int, password_hash: str) -> User | None:
        row = self._fetchone(
            query=f"""
                UPDATE users
                SET password_hash = %s
                WHERE id = %s
                RETURNING {self._SELECT_COLUMNS}
            """,
            params=(password_hash, user_id),
            context_msg="PostgresCredentialStore: update_secret failed",
            extra={"user_id": user_id},
        )
        return self._to_user(row) if row else None

    def delete(self, user_id: int) -> bool:
        row = self._fetchone(
            query="DELETE FROM users WHERE id = %s RETURNING id",
            params=(user_id,),
            context_msg="PostgresCredentialStore: delete failed",
            extra={"user_id": user_id},
        )
        return row is not None

    def list(self) -> list[User]:
        rows = self._fetchall(
            query=f"""
                SELECT {self._SELECT_COLUMNS}
                FROM users
                {self._ORDER_BY}
            """,
            context_msg="PostgresCredentialStore: list failed",
            extra={},
        )
        return [self._to_user(row) for row in rows]

    def ping(self) -> bool:
        try:
            with self._pool.connection() as conn:
                conn.execute("SELECT 1")
            return True
        except Exception as exc:
            logger.warning("PostgresCredentialStore: ping failed", extra={"error": str(exc)})
            return False
