"""Incremental SHA-1 digest engine.

SHA-1 serves here as a content fingerprint only, not as a security primitive.
Input is accumulated into 64-byte blocks; every full block is compressed into
the five running hash words, so memory use stays constant regardless of how
much data is appended.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable

from .errors import PreconditionViolation, StateConsumed

BLOCK_SIZE = 64
DIGEST_SIZE = 20
LENGTH_FIELD = 8

INITIAL_HASH = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476, 0xC3D2E1F0)

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF
_BLOCK_WORDS = struct.Struct(">16I")
_DIGEST_WORDS = struct.Struct(">5I")
_LENGTH = struct.Struct(">Q")


def _rotl(value: int, bits: int) -> int:
    return ((value << bits) | (value >> (32 - bits))) & _MASK32


def _choose(b: int, c: int, d: int) -> int:
    return (b & c) | (~b & d)


def _parity(b: int, c: int, d: int) -> int:
    return b ^ c ^ d


def _majority(b: int, c: int, d: int) -> int:
    return (b & c) | (b & d) | (c & d)


# (mixing function, round constant) for rounds 0-19, 20-39, 40-59, 60-79
_PHASES = (
    (_choose, 0x5A827999),
    (_parity, 0x6ED9EBA1),
    (_majority, 0x8F1BBCDC),
    (_parity, 0xCA62C1D6),
)


def _schedule(block: bytes | bytearray) -> list[int]:
    """Expand a 64-byte block into the 80-word message schedule."""
    words = list(_BLOCK_WORDS.unpack(block))
    for t in range(16, 80):
        words.append(_rotl(words[t - 3] ^ words[t - 8] ^ words[t - 14] ^ words[t - 16], 1))
    return words


def compress(state: tuple[int, ...] | list[int], block: bytes | bytearray) -> tuple[int, ...]:
    """Run the 80-round compression of `block` over `state`, returning the new hash words."""
    if len(block) != BLOCK_SIZE:
        raise PreconditionViolation(f"SHA-1 blocks are {BLOCK_SIZE} bytes, got {len(block)}.")

    schedule = _schedule(block)
    a, b, c, d, e = state
    for t in range(80):
        mix, k = _PHASES[t // 20]
        tmp = (_rotl(a, 5) + (mix(b, c, d) & _MASK32) + e + schedule[t] + k) & _MASK32
        e, d, c, b, a = d, c, _rotl(b, 30), a, tmp

    return tuple((h + v) & _MASK32 for h, v in zip(state, (a, b, c, d, e)))


class SHA1StreamDigest:
    """SHA-1 computation in progress.

    `append` may be called any number of times with any chunking; `finish`
    must be called exactly once and leaves the state terminal.
    """

    __slots__ = ("_block", "_hash", "_count", "_finished")

    def __init__(self) -> None:
        self._block = bytearray(BLOCK_SIZE)
        self._hash: tuple[int, ...] = INITIAL_HASH
        self._count = 0
        self._finished = False

    @property
    def count(self) -> int:
        """Number of message bytes appended so far."""
        return self._count

    @property
    def hash_words(self) -> tuple[int, ...]:
        """Intermediate hash value covering every full block seen so far."""
        return self._hash

    def append(self, data: bytes | bytearray | memoryview) -> None:
        """Absorb `data`, compressing each block as it fills."""
        self._ensure_open()
        self._absorb(memoryview(data).cast("B"))

    def finish(self) -> bytes:
        """Apply the SHA-1 padding and return the 20-byte digest."""
        self._ensure_open()
        bit_length = (self._count * 8) & _MASK64

        position = self._count % BLOCK_SIZE
        zeros = (BLOCK_SIZE - LENGTH_FIELD - 1 - position) % BLOCK_SIZE
        self._absorb(b"\x80" + bytes(zeros) + _LENGTH.pack(bit_length))

        self._finished = True
        return _DIGEST_WORDS.pack(*self._hash)

    def finish_into(self, out: bytearray | memoryview) -> None:
        """Write the digest into `out`, a writable buffer of exactly 20 bytes.

        A rejected destination leaves the state untouched.
        """
        try:
            view = memoryview(out)
        except TypeError as exc:
            raise PreconditionViolation("Digest destination must support the buffer protocol.") from exc
        if view.readonly:
            raise PreconditionViolation("Digest destination must be writable.")
        if view.nbytes != DIGEST_SIZE:
            raise PreconditionViolation(
                f"Digest destination must be exactly {DIGEST_SIZE} bytes, got {view.nbytes}."
            )
        view.cast("B")[:] = self.finish()

    def _absorb(self, data: bytes | memoryview) -> None:
        offset = 0
        remaining = len(data)
        while remaining:
            position = self._count % BLOCK_SIZE
            take = min(BLOCK_SIZE - position, remaining)
            self._block[position : position + take] = data[offset : offset + take]
            offset += take
            remaining -= take
            self._count += take
            if self._count % BLOCK_SIZE == 0:
                self._hash = compress(self._hash, self._block)
                self._block[:] = bytes(BLOCK_SIZE)

    def _ensure_open(self) -> None:
        if self._finished:
            raise StateConsumed("SHA-1 digest already finished.")


def digest_chunks(chunks: Iterable[bytes]) -> bytes:
    """Return the SHA-1 digest of the concatenation of `chunks`."""
    digest = SHA1StreamDigest()
    for chunk in chunks:
        digest.append(chunk)
    return digest.finish()


def sha1_hex(data: bytes) -> str:
    """Return the lowercase hex SHA-1 of `data`."""
    return digest_chunks([data]).hex()


__all__ = [
    "BLOCK_SIZE",
    "DIGEST_SIZE",
    "INITIAL_HASH",
    "SHA1StreamDigest",
    "compress",
    "digest_chunks",
    "sha1_hex",
]
