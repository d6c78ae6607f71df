"""
Blob Storage Value Objects

Immutable value objects for type safety and validation.
"""

import hashlib
import re
from dataclasses import dataclass


class InvalidBlobKeyError(ValueError):
    """Raised when a string is not a well-formed blob key."""
    pass


_KEY_PATTERN = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class BlobKey:
    """
    Value object representing a content-derived blob key.

    Keys are unsigned decimal integers rendered as strings. Because the
    character class excludes separators and dots, a valid key can always be
    joined onto the storage root without escaping it.
    """
    value: str

    def __post_init__(self):
        if not self.is_valid(self.value):
            raise InvalidBlobKeyError(
                f"Invalid blob key: expected digits only, got {self.value!r}"
            )

    @staticmethod
    def is_valid(value) -> bool:
        """Return True when value is a non-empty string of ASCII digits."""
        if not isinstance(value, str):
            return False
        return _KEY_PATTERN.fullmatch(value) is not None

    @classmethod
    def derive(cls, content: bytes) -> "BlobKey":
        """
        Derive the key for a content buffer.

        The key is a 64-bit BLAKE2b digest of the bytes, read as a big-endian
        unsigned integer. Identical bytes always yield the identical key.
        Sixty-four bits keep keys short enough to type; they only guard
        against accidental collisions.

        Args:
            content: Raw payload bytes

        Returns:
            BlobKey for the content
        """
        digest = hashlib.blake2b(bytes(content), digest_size=8).digest()
        return cls(str(int.from_bytes(digest, "big")))

    def __str__(self) -> str:
        return self.value
