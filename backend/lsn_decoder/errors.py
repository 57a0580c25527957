"""Errors raised while decoding an uplink payload."""

from __future__ import annotations


class DecodeError(Exception):
    """Base error for payload decoding failures."""


class TransportDecodeError(DecodeError):
    """Raised when the transport encoding (base64 or hex) is malformed."""

    def __init__(self, encoding: str, cause: Exception):
        super().__init__(f"{encoding} decode error: {cause}")
        self.encoding = encoding
        self.cause = cause


class ShortPayloadError(DecodeError):
    """Raised when the payload is below the global header floor."""

    def __init__(self, length: int):
        super().__init__(f"payload too short: {length} bytes")
        self.length = length


class UnsupportedModeError(DecodeError):
    """Raised when no handler is registered for the work mode."""

    def __init__(self, mode: int):
        super().__init__(f"unsupported mode {mode}")
        self.mode = mode


class MalformedPayloadError(DecodeError):
    """Raised when a payload is shorter than its work mode requires."""

    def __init__(self, mode: int, length: int, required: int | None = None):
        if required is None:
            message = f"malformed payload for mode {mode}: {length} bytes"
        else:
            message = f"malformed payload for mode {mode}: {length} bytes, need {required}"
        super().__init__(message)
        self.mode = mode
        self.length = length
        self.required = required
