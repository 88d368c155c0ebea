"""Exceptions raised by the streaming codecs."""

from __future__ import annotations


class CodecError(RuntimeError):
    """Base class for codec failures."""


class OutputExhausted(CodecError):
    """Raised when a destination buffer cannot hold the next output block.

    The encoder checks capacity before touching its state, so the caller can
    retry the same call with a larger buffer.
    """

    def __init__(self, needed: int, available: int) -> None:
        super().__init__(f"Output buffer too small: need {needed} bytes, {available} available.")
        self.needed = needed
        self.available = available


class PreconditionViolation(CodecError, ValueError):
    """Raised when a caller-supplied buffer has the wrong shape."""


class StateConsumed(CodecError):
    """Raised when a finalized codec state is used again."""


__all__ = ["CodecError", "OutputExhausted", "PreconditionViolation", "StateConsumed"]
