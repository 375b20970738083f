"""Staff portal authentication and role-based authorization core."""

__version__ = "0.1.0"
