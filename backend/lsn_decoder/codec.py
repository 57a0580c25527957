# lsn_decoder/codec.py
# Big-endian integer assembly, fixed-point scaling and sentinel checks.

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

NOT_MEASURED = 0x7FFF
SENSOR_ABSENT = 0xFFFF
NO_ECHO = 0x0000

# Temperature probes report either reserved pattern when they have nothing to say
TEMP_SENTINELS = (NOT_MEASURED, SENSOR_ABSENT)


def decode_uint16_be(hi: int, lo: int) -> int:
    return (hi << 8) | lo


def decode_int16_be(hi: int, lo: int) -> int:
    """Sign-extend the high byte, then OR in the low byte unsigned.

    (0xFF, 0x9C) -> -100, i.e. -10.0 °C once scaled by 10.
    """

    signed_hi = hi - 0x100 if hi & 0x80 else hi
    return (signed_hi << 8) | lo


def decode_uint32_be(b0: int, b1: int, b2: int, b3: int) -> int:
    return (b0 << 24) | (b1 << 16) | (b2 << 8) | b3


def scale(value: int, divisor: int) -> float:
    return float(value) / divisor


def is_sentinel(pair: Sequence[int], *patterns: int) -> bool:
    """True when the two bytes equal any of *patterns* (big-endian)."""

    return decode_uint16_be(pair[0], pair[1]) in patterns


@dataclass(frozen=True)
class FieldSpec:
    """One row of a work-mode layout table.

    ``offsets`` lists byte indices in assembly order, most significant first.
    They need not be contiguous (the weight field reads 9, 10, 7, 8).
    ``sentinels`` only apply to two-byte fields.
    """

    name: str
    offsets: tuple[int, ...]
    signed: bool = False
    divisor: int = 1
    sentinels: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        if len(self.offsets) not in (1, 2, 4):
            raise ValueError(f"{self.name}: unsupported field width {len(self.offsets)}")

    @property
    def width(self) -> int:
        return len(self.offsets)

    @property
    def end(self) -> int:
        """Smallest payload length that covers every offset."""

        return max(self.offsets) + 1


def _assemble(data: Sequence[int], signed: bool) -> int:
    if len(data) == 1:
        return data[0]
    if len(data) == 2:
        if signed:
            return decode_int16_be(data[0], data[1])
        return decode_uint16_be(data[0], data[1])
    return decode_uint32_be(data[0], data[1], data[2], data[3])


def read_field(raw: bytes, spec: FieldSpec) -> float | None:
    """Return the scaled value of *spec*, or None when its bytes hold a sentinel."""

    data = [raw[i] for i in spec.offsets]
    if spec.sentinels and spec.width == 2 and is_sentinel(data, *spec.sentinels):
        return None
    return scale(_assemble(data, spec.signed), spec.divisor)
