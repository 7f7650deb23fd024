"""Cache key derivation from the manifest file."""

import hashlib
import logging
from pathlib import Path
from typing import Union

from ..errors import ManifestUnreadableError

logger = logging.getLogger(__name__)

# Length of a SHA-256 hex digest
KEY_LENGTH = 64


def compute_checksum(content: Union[str, bytes]) -> str:
    """Compute SHA-256 checksum of content.

    Args:
        content: Content to hash (str is UTF-8 encoded first)

    Returns:
        Lowercase SHA-256 hex digest
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def derive_key(manifest_path: Union[str, Path]) -> str:
    """Derive the cache key for a manifest file.

    The key depends only on the exact bytes of the file, so any change,
    whitespace included, selects a different slot.

    Args:
        manifest_path: Path to the manifest (usually elm.json)

    Returns:
        64-character lowercase hex key

    Raises:
        ManifestUnreadableError: If the file cannot be opened or read
    """
    path = Path(manifest_path)
    try:
        content = path.read_bytes()
    except OSError as e:
        raise ManifestUnreadableError(path, e.strerror or str(e)) from e

    key = compute_checksum(content)
    logger.debug(f"Derived key {key} from {path} ({len(content)} bytes)")
    return key


def is_valid_key(name: str) -> bool:
    """Check whether a name has the shape of a cache key."""
    return len(name) == KEY_LENGTH and all(c in "0123456789abcdef" for c in name)
