"""Streaming Base64 and SHA-1 codecs."""

from .base64_stream import Base64StreamEncoder, encode_chunks, encoded_length
from .errors import CodecError, OutputExhausted, PreconditionViolation, StateConsumed
from .sha1_stream import DIGEST_SIZE, SHA1StreamDigest, digest_chunks, sha1_hex

__all__ = [
    "Base64StreamEncoder",
    "CodecError",
    "DIGEST_SIZE",
    "OutputExhausted",
    "PreconditionViolation",
    "SHA1StreamDigest",
    "StateConsumed",
    "digest_chunks",
    "encode_chunks",
    "encoded_length",
    "sha1_hex",
]
