"""Build-time helpers for the infrastructure app."""

from .hashing import (
    ArtifactError,
    ArtifactNotFoundError,
    ArtifactReference,
    file_hash,
)

__all__ = [
    "ArtifactError",
    "ArtifactNotFoundError",
    "ArtifactReference",
    "file_hash",
]
