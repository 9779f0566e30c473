"""Infrastructure layer implementations."""

from branchstock.infrastructure import storage

__all__ = ["storage"]
