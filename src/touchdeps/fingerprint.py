"""Content fingerprints: Base64 text of a streamed SHA-1 digest."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from touchdeps.codec import DIGEST_SIZE, Base64StreamEncoder, SHA1StreamDigest, encoded_length

FINGERPRINT_LENGTH = encoded_length(DIGEST_SIZE)
DEFAULT_CHUNK_SIZE = 64 * 1024


def encode_digest(digest: bytes) -> str:
    """Return the Base64 text for a raw 20-byte digest."""
    out = bytearray(FINGERPRINT_LENGTH)
    encoder = Base64StreamEncoder()
    pos = 0
    for byte in digest:
        pos = encoder.add(byte, out, pos)
    pos = encoder.finalize(out, pos)
    return out[:pos].decode("ascii")


def fingerprint_chunks(chunks: Iterable[bytes]) -> str:
    """Fingerprint the concatenation of `chunks`."""
    digest = SHA1StreamDigest()
    for chunk in chunks:
        digest.append(chunk)
    return encode_digest(digest.finish())


def fingerprint_bytes(data: bytes) -> str:
    return fingerprint_chunks([data])


def fingerprint_file(path: Path, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Return the fingerprint of the file at `path`, read in `chunk_size` pieces."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")
    with Path(path).open("rb") as handle:
        return fingerprint_chunks(iter(lambda: handle.read(chunk_size), b""))


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "FINGERPRINT_LENGTH",
    "encode_digest",
    "fingerprint_bytes",
    "fingerprint_chunks",
    "fingerprint_file",
]
