from typing import Literal

from pydantic import BaseModel, Field


class UplinkIn(BaseModel):
    data: str = Field(min_length=1, description="Encoded uplink payload")
    encoding: Literal["base64", "hex"] = "base64"


class MeasurementOut(BaseModel):
    name: str
    value: float


class DecodeOut(BaseModel):
    mode: int
    band: str
    measurements: list[MeasurementOut]


class ModeOut(BaseModel):
    mode: int
    name: str
    description: str
    min_length: int
    fields: list[str]


class BandOut(BaseModel):
    code: int
    name: str
