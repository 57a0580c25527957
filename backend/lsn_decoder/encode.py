# lsn_decoder/encode.py
# Scale and pack named readings into a work-mode payload (network byte order).

from __future__ import annotations

import base64
from typing import Mapping

from .codec import FieldSpec
from .modes import HUM_SHT, ILLUM, LAYOUTS, TEMP_SHT, ModeLayout

_LAYOUTS: dict[int, ModeLayout] = {int(layout.mode): layout for layout in LAYOUTS}


def _to_int(v: float, spec: FieldSpec) -> int:
    scaled = round(v * spec.divisor)
    bits = 8 * spec.width
    if spec.signed:
        return max(-(1 << (bits - 1)), min((1 << (bits - 1)) - 1, int(scaled)))
    return max(0, min((1 << bits) - 1, int(scaled)))


def _write(buf: bytearray, spec: FieldSpec, value: int) -> None:
    mask = (1 << (8 * spec.width)) - 1
    for offset, byte in zip(spec.offsets, (value & mask).to_bytes(spec.width, "big")):
        buf[offset] = byte


def _pack(buf: bytearray, spec: FieldSpec, readings: Mapping[str, float]) -> None:
    if spec.name in readings:
        _write(buf, spec, _to_int(float(readings[spec.name]), spec))
    elif spec.sentinels:
        _write(buf, spec, spec.sentinels[0])
    else:
        raise ValueError(f"Missing reading for required field {spec.name!r}")


def encode_payload(mode: int, readings: Mapping[str, float], band: int = 0x01) -> bytes:
    """
    Build a raw uplink for *mode* from measurement names to engineering values.

    Optional fields left out of *readings* are written as their sentinel, so the
    decoder omits them. For modes 0 and 2 an ``Illum`` reading selects the light
    branch (bytes 9-10 zero); otherwise the SHT branch is written, where a
    humidity that rounds to zero reads back as illumination.
    The band code only lands in byte 0 when no field uses that byte.
    """
    layout = _LAYOUTS.get(mode)
    if layout is None:
        raise ValueError(f"unsupported mode {mode}")

    buf = bytearray(layout.min_length)
    if all(0 not in spec.offsets for spec in layout.fields):
        buf[0] = band & 0xFF

    for spec in layout.fields:
        _pack(buf, spec, readings)

    if layout.light_or_sht:
        if ILLUM.name in readings:
            _write(buf, ILLUM, _to_int(float(readings[ILLUM.name]), ILLUM))
        else:
            _pack(buf, TEMP_SHT, readings)
            _pack(buf, HUM_SHT, readings)

    buf[6] = (mode << 2) & 0x7C
    return bytes(buf)


def to_base64(payload: bytes) -> str:
    return base64.b64encode(payload).decode("ascii")


def to_hex(payload: bytes) -> str:
    return payload.hex().upper()
