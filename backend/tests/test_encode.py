import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from lsn_decoder.decoder import Decoder  # noqa: E402
from lsn_decoder.encode import encode_payload, to_base64, to_hex  # noqa: E402


def test_encode_mode1_reproduces_reference_bytes():
    payload = encode_payload(1, {"Bat V": 0.1, "ADC CH0V": 0.2, "Distance Cm": 30.0, "Signal": 100.0})

    assert payload == bytes([0x00, 0x64, 0x7F, 0xFF, 0x00, 0xC8, 0x04, 0x01, 0x2C, 0x00, 0x64])
    assert to_hex(payload) == "00647FFF00C804012C0064"


def test_encode_negative_temperature_as_twos_complement():
    payload = encode_payload(3, {"Bat V": 3.3, "ADC CH0V": 0.0, "Temp C2": -10.0})

    assert payload[7:9] == b"\xff\x9c"
    assert payload[2:4] == b"\x7f\xff"
    assert payload[9:11] == b"\x7f\xff"


def test_encode_band_lands_in_free_header_byte():
    payload = encode_payload(4, {"Weight": 16909060}, band=0x02)
    uplink = Decoder().decode_packet(payload)

    assert payload[0] == 0x02
    assert uplink.header.band == "US915"
    assert uplink.measurements == [("Weight", 16909060.0)]


def test_encode_light_branch_clears_humidity_bytes():
    payload = encode_payload(0, {"Bat V": 3.3, "Temp C1": 21.5, "ADC CH0V": 1.2, "Illum": 812})

    assert payload[9:11] == b"\x00\x00"
    assert Decoder().decode_bytes(payload)[-1] == ("Illum", 812.0)


def test_encode_mode8_counters():
    payload = encode_payload(8, {"Bat V": 3.6, "Temp C1": 4.5, "Temp C2": -0.5, "Count 1": 7, "Count 2": 70000})

    assert len(payload) == 17
    assert Decoder().decode_bytes(payload) == [
        ("Bat V", 3.6),
        ("Temp C1", 4.5),
        ("Temp C2", -0.5),
        ("Count 1", 7.0),
        ("Count 2", 70000.0),
    ]


def test_encode_clamps_to_field_range():
    payload = encode_payload(5, {"Count": -4})

    assert payload[7:11] == b"\x00\x00\x00\x00"


def test_encode_requires_non_optional_fields():
    with pytest.raises(ValueError):
        encode_payload(7, {"Bat V": 3.3, "ADC CH0V": 1.0})


def test_encode_rejects_reserved_mode():
    with pytest.raises(ValueError):
        encode_payload(6, {})


def test_to_base64():
    assert to_base64(b"\x00\x64") == "AGQ="
