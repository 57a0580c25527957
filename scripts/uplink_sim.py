import os
import random
import sys
import time
from pathlib import Path

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "backend"))

from lsn_decoder.encode import encode_payload, to_hex  # noqa: E402

API = os.getenv("API", "http://localhost:8000")
MODE = int(os.getenv("MODE", "1"))
PERIOD = float(os.getenv("PERIOD", "1"))


def fake_readings(mode: int, rng: random.Random) -> dict[str, float]:
    readings = {
        "Bat V": round(3.3 + rng.uniform(-0.2, 0.3), 3),
        "Temp C1": round(21.0 + rng.uniform(-3.0, 3.0), 1),
        "ADC CH0V": round(rng.uniform(0.0, 3.3), 3),
        "ADC CH1V": round(rng.uniform(0.0, 3.3), 3),
        "ADC CH4V": round(rng.uniform(0.0, 3.3), 3),
        "Temp C2": round(19.0 + rng.uniform(-5.0, 5.0), 1),
        "Temp C3": round(18.0 + rng.uniform(-5.0, 5.0), 1),
        "Distance Cm": round(rng.uniform(20.0, 400.0), 1),
        "Signal": float(rng.randint(50, 200)),
        "Weight": float(rng.randint(0, 50000)),
        "Count": float(rng.randint(0, 100000)),
        "Count 1": float(rng.randint(0, 100000)),
        "Count 2": float(rng.randint(0, 100000)),
    }
    if mode == 2:
        readings["Bat V"] = round(3.3 + rng.uniform(-0.2, 0.3), 1)
    if rng.random() < 0.5:
        readings["Illum"] = float(rng.randint(0, 65000))
    else:
        readings["TempC SHT"] = round(22.0 + rng.uniform(-2.0, 2.0), 1)
        readings["Hum SHT"] = round(rng.uniform(30.0, 70.0), 1)
    return readings


def main():
    rng = random.Random(123)
    with httpx.Client(base_url=API, timeout=5.0) as client:
        while True:
            payload = encode_payload(MODE, fake_readings(MODE, rng))
            r = client.post(
                "/ingest/lorawan/raw",
                content=payload,
                headers={"Content-Type": "application/octet-stream"},
            )
            print(to_hex(payload), "->", r.status_code, r.json())
            time.sleep(PERIOD)


if __name__ == "__main__":
    main()
