"""Header parsing and work-mode dispatch for uplink payloads."""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from .errors import (
    MalformedPayloadError,
    ShortPayloadError,
    TransportDecodeError,
    UnsupportedModeError,
)
from .modes import HANDLERS, Header, Measurement, ModeHandler

logger = logging.getLogger(__name__)

MIN_PAYLOAD_LENGTH = 7

BANDS: Mapping[int, str] = MappingProxyType(
    {
        0x01: "EU868",
        0x02: "US915",
        0x03: "IN865",
        0x04: "AU915",
        0x05: "KZ865",
        0x06: "RU864",
        0x07: "AS923",
        0x08: "AS923_1",
        0x09: "AS923_2",
        0x0A: "AS923_3",
        0x0B: "CN470",
        0x0C: "EU433",
        0x0D: "KR920",
        0x0E: "MA869",
        0x0F: "AS923_4",
    }
)


def band_name(code: int) -> str:
    """Return the frequency band for *code*; unknown codes give an empty string."""

    return BANDS.get(code, "")


def transport_decode(text: str, encoding: str = "base64") -> bytes:
    """Turn the transport text into raw payload bytes (strict standard base64, or hex)."""

    try:
        if encoding == "hex":
            return bytes.fromhex(text)
        if encoding == "base64":
            # line-wrapped uplinks carry CR/LF between base64 groups
            return base64.b64decode(text.replace("\r", "").replace("\n", ""), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise TransportDecodeError(encoding, exc) from exc
    raise ValueError(f"Unknown transport encoding: {encoding}")


def parse_header(raw: bytes) -> Header:
    return Header(mode=(raw[6] & 0x7C) >> 2, band=band_name(raw[0]))


@dataclass(frozen=True)
class DecodedUplink:
    header: Header
    measurements: list[Measurement]


class Decoder:
    """Dispatch raw payloads to the handler registered for their work mode.

    The handler mapping is frozen at construction, so one instance can be
    shared freely between concurrent callers.
    """

    def __init__(self, handlers: Mapping[int, ModeHandler] | None = None):
        if handlers is None:
            self.handlers = HANDLERS
        else:
            self.handlers = MappingProxyType(dict(handlers))

    def decode(self, b64: str) -> list[Measurement]:
        """Decode a standard base64 uplink into its measurements."""

        return self.decode_bytes(transport_decode(b64, "base64"))

    def decode_hex(self, text: str) -> list[Measurement]:
        return self.decode_bytes(transport_decode(text, "hex"))

    def decode_bytes(self, raw: bytes) -> list[Measurement]:
        return self.decode_packet(raw).measurements

    def decode_packet(self, raw: bytes) -> DecodedUplink:
        raw = bytes(raw)
        if len(raw) < MIN_PAYLOAD_LENGTH:
            raise ShortPayloadError(len(raw))

        header = parse_header(raw)
        handler = self.handlers.get(header.mode)
        if handler is None:
            raise UnsupportedModeError(header.mode)

        try:
            measurements = handler.decode(header, raw)
        except IndexError as exc:
            raise MalformedPayloadError(header.mode, len(raw)) from exc

        logger.debug(
            "Decoded mode %d (%s) payload of %d bytes into %d measurements",
            header.mode,
            header.band or "unknown band",
            len(raw),
            len(measurements),
        )
        return DecodedUplink(header=header, measurements=measurements)


_default_decoder = Decoder()


def decode(b64: str) -> list[Measurement]:
    """Decode *b64* with the default handler registry."""

    return _default_decoder.decode(b64)
