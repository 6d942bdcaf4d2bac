"""API route handlers."""

from api.routes import health, commitments, claims

__all__ = ["health", "commitments", "claims"]
