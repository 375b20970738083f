"""
============================================================
CRC CARD
============================================================
Class: 001_identity (Alembic migration)

Responsibilities:
  - Create the `users` credential table.
  - identity_ciphertext holds the encrypted username; identity_lookup is the
    indexed equality key (deterministic ciphertext or HMAC blind index).
  - Constrain role to the closed set.

Collaborators:
  - infrastructure/repositories/postgres/credential_store.py (column contract)

Policy:
  - Baseline migration. Later changes go in additive migrations (002+).
  - Naming convention: pk_<table>, uq_<table>_<col>, ix_<table>_<col>,
    ck_<table>_<name>.
============================================================
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_identity"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger, sa.Identity(always=False), nullable=False),
        sa.Column("identity_ciphertext", postgresql.BYTEA, nullable=False),
        sa.Column("identity_lookup", postgresql.BYTEA, nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("identity_lookup", name="uq_users_identity_lookup"),
        sa.CheckConstraint(
            "role IN ('admin', 'staff', 'doctor')", name="ck_users_role"
        ),
    )

    # Listing order: created_at DESC, id DESC.
    op.create_index(
        "ix_users_created_at",
        "users",
        [sa.text("created_at DESC"), sa.text("id DESC")],
    )


def downgrade() -> None:
    op.drop_index("ix_users_created_at", table_name="users")
    op.drop_table("users")
