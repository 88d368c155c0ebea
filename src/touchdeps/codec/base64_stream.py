"""Incremental Base64 encoder (RFC 4648 standard alphabet, ``=`` padding)."""

from __future__ import annotations

from collections.abc import Iterable

from .errors import OutputExhausted, StateConsumed

ALPHABET = b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
PAD = ord("=")
GROUP_BYTES = 3
BLOCK_CHARS = 4

_SHIFTS = (18, 12, 6, 0)


def encoded_length(size: int) -> int:
    """Return the number of characters emitted for `size` input bytes."""
    if size < 0:
        raise ValueError("size must be >= 0")
    return BLOCK_CHARS * -(-size // GROUP_BYTES)


def _write_sextets(group: int, chars: int, out: bytearray | memoryview, pos: int) -> int:
    """Write the leading `chars` sextets of a 24-bit `group` into `out`."""
    for shift in _SHIFTS[:chars]:
        out[pos] = ALPHABET[(group >> shift) & 0x3F]
        pos += 1
    return pos


class Base64StreamEncoder:
    """Base64 encoding in progress.

    Bytes are collected into 3-byte groups. A completed group is held back
    until the next group completes (or `finalize` runs), so at most two
    pending bytes and one held group live in the state at any time.

    Output goes into caller-owned writable buffers (``bytearray`` or a
    writable ``memoryview``) at an explicit position. Capacity is checked
    before any state changes: on `OutputExhausted` the call can simply be
    repeated with a larger buffer.
    """

    __slots__ = ("_group", "_pending", "_held", "_total", "_finalized")

    def __init__(self) -> None:
        self._group = 0
        self._pending = 0
        self._held: int | None = None
        self._total = 0
        self._finalized = False

    @property
    def total(self) -> int:
        """Number of bytes added so far."""
        return self._total

    @property
    def finalized(self) -> bool:
        return self._finalized

    def pending_output(self) -> int:
        """Room the next `add` call needs in its destination buffer."""
        if self._pending == GROUP_BYTES - 1 and self._held is not None:
            return BLOCK_CHARS
        return 0

    def final_output(self) -> int:
        """Room `finalize` needs in its destination buffer."""
        size = BLOCK_CHARS if self._held is not None else 0
        if self._pending:
            size += BLOCK_CHARS
        return size

    def add(self, byte: int, out: bytearray | memoryview, pos: int = 0) -> int:
        """Consume one input byte, returning the new write position in `out`."""
        self._ensure_open()
        if not 0 <= byte <= 0xFF:
            raise ValueError(f"byte out of range: {byte!r}")
        _check_room(out, pos, self.pending_output())

        self._group = (self._group << 8) | byte
        self._pending += 1
        self._total += 1
        if self._pending == GROUP_BYTES:
            if self._held is not None:
                pos = _write_sextets(self._held, BLOCK_CHARS, out, pos)
            self._held = self._group
            self._group = 0
            self._pending = 0
        return pos

    def finalize(self, out: bytearray | memoryview, pos: int = 0) -> int:
        """Flush the held group and any pending bytes with padding.

        The state is terminal afterwards.
        """
        self._ensure_open()
        _check_room(out, pos, self.final_output())

        if self._held is not None:
            pos = _write_sextets(self._held, BLOCK_CHARS, out, pos)
            self._held = None
        if self._pending:
            group = self._group << (8 * (GROUP_BYTES - self._pending))
            pos = _write_sextets(group, self._pending + 1, out, pos)
            for _ in range(GROUP_BYTES - self._pending):
                out[pos] = PAD
                pos += 1
            self._group = 0
            self._pending = 0
        self._finalized = True
        return pos

    def update(self, data: bytes | bytearray | memoryview) -> bytes:
        """Encode a chunk, returning whatever complete blocks became ready."""
        self._ensure_open()
        ready = self._held is not None
        completed = (self._pending + len(data)) // GROUP_BYTES
        # each completed group flushes the one held before it
        out = bytearray(BLOCK_CHARS * max(0, completed - (0 if ready else 1)))
        pos = 0
        for byte in bytes(data):
            pos = self.add(byte, out, pos)
        return bytes(out[:pos])

    def finish(self) -> bytes:
        """Finalize into a freshly sized buffer and return the tail output."""
        self._ensure_open()
        out = bytearray(self.final_output())
        pos = self.finalize(out)
        return bytes(out[:pos])

    def _ensure_open(self) -> None:
        if self._finalized:
            raise StateConsumed("Base64 encoder already finalized.")


def _check_room(out: bytearray | memoryview, pos: int, needed: int) -> None:
    available = len(out) - pos
    if needed > available:
        raise OutputExhausted(needed, max(available, 0))


def encode_chunks(chunks: Iterable[bytes]) -> str:
    """Return the Base64 text of the concatenation of `chunks`."""
    encoder = Base64StreamEncoder()
    parts = [encoder.update(chunk) for chunk in chunks]
    parts.append(encoder.finish())
    return b"".join(parts).decode("ascii")


__all__ = [
    "ALPHABET",
    "Base64StreamEncoder",
    "encode_chunks",
    "encoded_length",
]
