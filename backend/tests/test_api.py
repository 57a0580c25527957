import base64
import logging
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from lsn_decoder.main import app  # noqa: E402

MODE1 = bytes([0x00, 0x64, 0x7F, 0xFF, 0x00, 0xC8, 0x04, 0x01, 0x2C, 0x00, 0x64])


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def test_health(client):
    r = client.get("/health")

    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_decode_base64(client):
    r = client.post("/api/decode", json={"data": base64.b64encode(MODE1).decode("ascii")})

    assert r.status_code == 200
    assert r.json() == {
        "mode": 1,
        "band": "",
        "measurements": [
            {"name": "Bat V", "value": 0.1},
            {"name": "ADC CH0V", "value": 0.2},
            {"name": "Distance Cm", "value": 30.0},
            {"name": "Signal", "value": 100.0},
        ],
    }


def test_decode_hex(client):
    r = client.post("/api/decode", json={"data": MODE1.hex(), "encoding": "hex"})

    assert r.status_code == 200
    assert [m["name"] for m in r.json()["measurements"]] == ["Bat V", "ADC CH0V", "Distance Cm", "Signal"]


def test_decode_invalid_base64_is_bad_request(client, caplog):
    with caplog.at_level(logging.WARNING, logger="lsn_decoder.routers.decode"):
        r = client.post("/api/decode", json={"data": "not-base64!!"})

    assert r.status_code == 400
    assert r.json()["detail"].startswith("base64 decode error")
    assert "Rejected uplink" in caplog.text


def test_decode_short_payload(client):
    r = client.post("/api/decode", json={"data": base64.b64encode(bytes(5)).decode("ascii")})

    assert r.status_code == 422
    assert r.json()["detail"] == "payload too short: 5 bytes"


def test_decode_unsupported_mode(client):
    raw = bytearray(8)
    raw[6] = 6 << 2
    r = client.post("/api/decode", json={"data": bytes(raw).hex(), "encoding": "hex"})

    assert r.status_code == 422
    assert r.json()["detail"] == "unsupported mode 6"


def test_decode_rejects_empty_data(client):
    r = client.post("/api/decode", json={"data": ""})

    assert r.status_code == 422


def test_ingest_raw_octet_stream(client):
    raw = bytearray(11)
    raw[0] = 0x01
    raw[6] = 5 << 2
    raw[7:11] = b"\x00\x00\x00\x2a"
    r = client.post(
        "/ingest/lorawan/raw",
        content=bytes(raw),
        headers={"Content-Type": "application/octet-stream"},
    )

    assert r.status_code == 200
    assert r.json() == {"mode": 5, "band": "EU868", "measurements": [{"name": "Count", "value": 42.0}]}


def test_ingest_raw_malformed_mode8(client):
    raw = bytearray(11)
    raw[6] = 8 << 2
    r = client.post("/ingest/lorawan/raw", content=bytes(raw))

    assert r.status_code == 422
    assert r.json()["detail"] == "malformed payload for mode 8: 11 bytes, need 17"


def test_list_modes(client):
    r = client.get("/api/modes")
    modes = {m["mode"]: m for m in r.json()}

    assert r.status_code == 200
    assert sorted(modes) == [0, 1, 2, 3, 4, 5, 7, 8]
    assert modes[8]["min_length"] == 17
    assert modes[2]["fields"] == ["Bat V", "ADC CH0V", "ADC CH1V", "ADC CH4V", "Illum", "TempC SHT", "Hum SHT"]
    assert modes[4]["name"] == "WEIGHT"


def test_list_bands(client):
    r = client.get("/api/bands")
    bands = {b["code"]: b["name"] for b in r.json()}

    assert r.status_code == 200
    assert len(bands) == 15
    assert bands[1] == "EU868"
    assert bands[0x0B] == "CN470"


def test_rejected_large_body_logs_only_its_head(client, caplog):
    raw = bytearray(b"\xab" * 4096)
    raw[6] = 6 << 2

    with caplog.at_level(logging.WARNING, logger="lsn_decoder.routers.decode"):
        r = client.post("/ingest/lorawan/raw", content=bytes(raw))

    assert r.status_code == 422
    assert "4096 bytes" in caplog.text
    assert "ab" * 17 not in caplog.text


def test_decode_line_wrapped_base64(client):
    b64 = base64.b64encode(MODE1).decode("ascii")
    r = client.post("/api/decode", json={"data": b64[:8] + "\r\n" + b64[8:]})

    assert r.status_code == 200
    assert r.json()["mode"] == 1
