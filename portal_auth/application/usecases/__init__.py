"""Use cases (application services). Each one returns a typed result."""
