# lsn_decoder/modes.py
# Per work-mode field layouts and the read-only handler registry.

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping, NamedTuple, Protocol

from .codec import (
    NO_ECHO,
    SENSOR_ABSENT,
    TEMP_SENTINELS,
    FieldSpec,
    decode_uint16_be,
    read_field,
)
from .errors import MalformedPayloadError


class Measurement(NamedTuple):
    name: str
    value: float


@dataclass(frozen=True)
class Header:
    mode: int
    band: str


class ModeHandler(Protocol):
    def decode(self, header: Header, raw: bytes) -> list[Measurement]:
        ...


class WorkMode(IntEnum):
    IIC = 0
    DISTANCE = 1
    THREE_ADC = 2
    TWO_DS18B20 = 3
    WEIGHT = 4
    COUNTING = 5
    ADC_DS18B20 = 7
    DOUBLE_COUNTING = 8


BAT_V = FieldSpec("Bat V", (0, 1), divisor=1000)
TEMP_C1 = FieldSpec("Temp C1", (2, 3), signed=True, divisor=10, sentinels=TEMP_SENTINELS)
ADC_CH0V = FieldSpec("ADC CH0V", (4, 5), divisor=1000)

ILLUM = FieldSpec("Illum", (7, 8))
TEMP_SHT = FieldSpec("TempC SHT", (7, 8), signed=True, divisor=10, sentinels=TEMP_SENTINELS)
HUM_SHT = FieldSpec("Hum SHT", (9, 10), divisor=10, sentinels=(SENSOR_ABSENT,))


def _light_or_sht(raw: bytes, humidity_needs_temp: bool = False) -> list[Measurement]:
    """Bytes 9-10 equal to zero select the light sensor, anything else the SHT probe.

    With *humidity_needs_temp* the humidity is only reported alongside a valid
    SHT temperature.
    """

    out: list[Measurement] = []
    if decode_uint16_be(raw[9], raw[10]) == 0:
        out.append(Measurement(ILLUM.name, read_field(raw, ILLUM)))
        return out
    temp = read_field(raw, TEMP_SHT)
    if temp is not None:
        out.append(Measurement(TEMP_SHT.name, temp))
    elif humidity_needs_temp:
        return out
    hum = read_field(raw, HUM_SHT)
    if hum is not None:
        out.append(Measurement(HUM_SHT.name, hum))
    return out


@dataclass(frozen=True)
class ModeLayout:
    """Table-driven handler: fields in emission order, optionally followed by
    the light/SHT block shared by modes 0 and 2."""

    mode: WorkMode
    description: str
    fields: tuple[FieldSpec, ...]
    light_or_sht: bool = False
    humidity_needs_temp: bool = False
    min_length: int = 11

    def __post_init__(self) -> None:
        specs = self.fields + ((ILLUM, TEMP_SHT, HUM_SHT) if self.light_or_sht else ())
        needed = max(spec.end for spec in specs)
        if needed > self.min_length:
            raise ValueError(f"mode {int(self.mode)} reads {needed} bytes but min_length is {self.min_length}")

    def names(self) -> list[str]:
        """Every measurement name the layout can emit, in emission order."""

        names = [spec.name for spec in self.fields]
        if self.light_or_sht:
            names += [ILLUM.name, TEMP_SHT.name, HUM_SHT.name]
        return names

    def decode(self, header: Header, raw: bytes) -> list[Measurement]:
        if len(raw) < self.min_length:
            raise MalformedPayloadError(int(self.mode), len(raw), self.min_length)

        out: list[Measurement] = []
        for spec in self.fields:
            value = read_field(raw, spec)
            if value is None:
                continue
            out.append(Measurement(spec.name, value))
        if self.light_or_sht:
            out.extend(_light_or_sht(raw, self.humidity_needs_temp))
        return out


def _common(*, adc: bool = True) -> tuple[FieldSpec, ...]:
    return (BAT_V, TEMP_C1, ADC_CH0V) if adc else (BAT_V, TEMP_C1)


def _temp(name: str, offset: int) -> FieldSpec:
    return FieldSpec(name, (offset, offset + 1), signed=True, divisor=10, sentinels=TEMP_SENTINELS)


def _uint32(name: str, *offsets: int) -> FieldSpec:
    return FieldSpec(name, offsets)


LAYOUTS: tuple[ModeLayout, ...] = (
    ModeLayout(
        WorkMode.IIC,
        "3ADC + IIC (SHT or illumination)",
        _common(),
        light_or_sht=True,
        humidity_needs_temp=True,
    ),
    ModeLayout(
        WorkMode.DISTANCE,
        "Ultrasonic distance",
        _common()
        + (
            FieldSpec("Distance Cm", (7, 8), divisor=10, sentinels=(NO_ECHO,)),
            FieldSpec("Signal", (9, 10), sentinels=(SENSOR_ABSENT,)),
        ),
    ),
    ModeLayout(
        WorkMode.THREE_ADC,
        "3ADC + IIC, battery in byte 11",
        (
            FieldSpec("Bat V", (11,), divisor=10),
            FieldSpec("ADC CH0V", (0, 1), divisor=1000),
            FieldSpec("ADC CH1V", (2, 3), divisor=1000),
            FieldSpec("ADC CH4V", (4, 5), divisor=1000),
        ),
        light_or_sht=True,
        min_length=12,
    ),
    ModeLayout(WorkMode.TWO_DS18B20, "Two extra DS18B20 probes", _common() + (_temp("Temp C2", 7), _temp("Temp C3", 9))),
    ModeLayout(WorkMode.WEIGHT, "Weight", (_uint32("Weight", 9, 10, 7, 8),)),
    ModeLayout(WorkMode.COUNTING, "Interrupt counting", (_uint32("Count", 7, 8, 9, 10),)),
    ModeLayout(
        WorkMode.ADC_DS18B20,
        "3ADC + DS18B20",
        _common()
        + (
            FieldSpec("ADC CH1V", (7, 8), divisor=1000),
            FieldSpec("ADC CH4V", (9, 10), divisor=1000),
        ),
    ),
    ModeLayout(
        WorkMode.DOUBLE_COUNTING,
        "DS18B20 probes + two counters",
        _common(adc=False)
        + (
            _temp("Temp C2", 4),
            _temp("Temp C3", 7),
            _uint32("Count 1", 9, 10, 11, 12),
            _uint32("Count 2", 13, 14, 15, 16),
        ),
        min_length=17,
    ),
)

# Mode 6 is reserved on the hardware and stays unregistered.
HANDLERS: Mapping[int, ModeHandler] = MappingProxyType({int(layout.mode): layout for layout in LAYOUTS})
