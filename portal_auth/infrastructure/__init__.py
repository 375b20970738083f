"""Infrastructure adapters: Postgres pool, credential stores, identity cipher."""
