"""Application layer: user management use cases and bootstrap tasks."""
