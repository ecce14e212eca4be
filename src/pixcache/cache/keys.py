"""Disk filename derivation — stable, collision-free names from identifiers."""

from __future__ import annotations

import hashlib
import logging
import string

logger = logging.getLogger(__name__)

# Most filesystems cap a single path component at 255 bytes
MAX_FILENAME_BYTES = 255

_SAFE_BYTES = frozenset((string.ascii_letters + string.digits).encode("ascii"))


def canonical_key(identifier: object) -> str:
    """Canonical string form of an identifier, used as the memory key."""
    return str(identifier)


def encode_identifier(identifier: object) -> str:
    """Percent-encode every byte that is not an ASCII letter or digit.

    Raises UnicodeEncodeError if the canonical string is not valid UTF-8
    (e.g. contains lone surrogates).
    """
    raw = canonical_key(identifier).encode("utf-8")
    return "".join(chr(b) if b in _SAFE_BYTES else f"%{b:02X}" for b in raw)


def disk_filename(identifier: object) -> str:
    """Derive the cache filename for an identifier.

    The alphanumeric encoding is injective; names longer than the filesystem
    limit are replaced by a SHA-256 digest, which is still deterministic.

    Letter case is kept as-is. On a case-insensitive filesystem (the macOS
    and Windows defaults) two identifiers that differ only in case share
    one cache file, and the later save overwrites the earlier.
    """
    key = canonical_key(identifier)
    try:
        name = encode_identifier(key)
    except UnicodeEncodeError:
        logger.warning("Identifier is not valid UTF-8, using hashed filename: %r", key)
        return _hash_key(key.encode("utf-8", "surrogatepass"))

    if not name:
        return _hash_key(b"")
    if len(name) > MAX_FILENAME_BYTES:
        return _hash_key(key.encode("utf-8"))
    return name


def _hash_key(raw: bytes) -> str:
    # "_" never appears in an encoded name, so the two namespaces cannot collide
    return "_" + hashlib.sha256(raw).hexdigest()
