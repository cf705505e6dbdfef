"""
Content hashing for packaged deployment artifacts.

The hash of the Lambda bundle is the only signal used to decide whether the
function code must be redeployed, so it is always computed fresh from the
bytes on disk, after packaging.
"""

import base64
import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

# Read size for streaming the artifact through the digest
CHUNK_SIZE = 64 * 1024


class ArtifactError(Exception):
    """Raised when a deployment artifact cannot be hashed."""
    pass


class ArtifactNotFoundError(ArtifactError, FileNotFoundError):
    """Raised when the deployment artifact does not exist."""
    pass


def file_hash(path: Union[str, Path]) -> str:
    """
    Compute the base64-encoded SHA-256 digest of a file.

    The file is streamed in chunks and the digest is only produced once the
    whole file has been read.

    Args:
        path: Path to the artifact (e.g., backend/dist/lambda.zip)

    Returns:
        Base64 SHA-256 digest (44 characters)

    Raises:
        ArtifactNotFoundError: If the path does not exist or is not a file
        ArtifactError: If the file cannot be read
    """
    path = Path(path)
    if not path.is_file():
        raise ArtifactNotFoundError(f"Deployment artifact not found: {path}")

    digest = hashlib.sha256()
    try:
        with path.open("rb") as fh:
            for chunk in iter(lambda: fh.read(CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as e:
        raise ArtifactError(f"Cannot read deployment artifact {path}: {e}") from e

    return base64.b64encode(digest.digest()).decode("ascii")


@dataclass(frozen=True)
class ArtifactReference:
    """A packaged deployment bundle and the hash of its current content."""

    path: Path
    source_hash: str

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ArtifactReference":
        """Hash the artifact at `path` and return a reference to it."""
        path = Path(path).resolve()
        source_hash = file_hash(path)
        logger.info(f"Hashed deployment artifact {path}: {source_hash}")
        return cls(path=path, source_hash=source_hash)
