"""touchdeps: content-fingerprint change detection."""

__version__ = "0.1.0"
