"""
Path Resolver

Maps blob keys to locations under the configured storage root. This is the
only input-sanitization boundary: user-supplied keys are validated here
before any filesystem call is made.
"""

import logging
from pathlib import Path
from typing import Union

from domain.blob_storage.value_objects import BlobKey
from domain.errors import BlobNotFoundError

logger = logging.getLogger(__name__)


class PathResolver:
    """
    Resolves keys to directories under a storage root.

    Attributes:
        storage_root: Directory holding one sub-directory per key. An empty
            string means the process working directory.
    """

    def __init__(self, storage_root: Union[str, Path] = ""):
        self.storage_root = Path(storage_root)

    def resolve(self, key: BlobKey) -> Path:
        """Location of the entry for key."""
        return self.storage_root / key.value

    def validate_user_key(self, raw: str) -> BlobKey:
        """
        Validate a key received from a client.

        Args:
            raw: Untrusted key string (e.g. a query parameter)

        Returns:
            BlobKey for raw

        Raises:
            BlobNotFoundError: If raw is not purely digits
        """
        if not BlobKey.is_valid(raw):
            logger.debug(f"Rejected malformed key: {raw!r}")
            raise BlobNotFoundError(raw)
        return BlobKey(raw)

    def is_key_location(self, path: Path) -> bool:
        """True if path is a direct child of the root named by a valid key."""
        return path.parent == self.storage_root and BlobKey.is_valid(path.name)
