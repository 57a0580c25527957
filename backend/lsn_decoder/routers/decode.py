import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from ..decoder import BANDS, DecodedUplink, Decoder, transport_decode
from ..errors import DecodeError, TransportDecodeError
from ..modes import LAYOUTS
from ..schemas import BandOut, DecodeOut, MeasurementOut, ModeOut, UplinkIn

logger = logging.getLogger(__name__)

router = APIRouter(tags=["decode"])

LOG_HEAD_BYTES = 16

_decoder = Decoder()


def get_decoder() -> Decoder:
    return _decoder


def _http_error(exc: DecodeError) -> HTTPException:
    if isinstance(exc, TransportDecodeError):
        code = 400
    else:
        code = 422
    return HTTPException(status_code=code, detail=str(exc))


def _to_out(uplink: DecodedUplink) -> DecodeOut:
    return DecodeOut(
        mode=uplink.header.mode,
        band=uplink.header.band,
        measurements=[MeasurementOut(name=m.name, value=m.value) for m in uplink.measurements],
    )


def _decode_raw(decoder: Decoder, raw: bytes) -> DecodeOut:
    try:
        uplink = decoder.decode_packet(raw)
    except DecodeError as exc:
        logger.warning("Rejected payload (%d bytes, head=%s): %s", len(raw), raw[:LOG_HEAD_BYTES].hex(), exc)
        raise _http_error(exc) from exc
    return _to_out(uplink)


@router.post("/api/decode", response_model=DecodeOut)
def decode_uplink(payload: UplinkIn, decoder: Decoder = Depends(get_decoder)):
    try:
        raw = transport_decode(payload.data.strip(), payload.encoding)
    except TransportDecodeError as exc:
        logger.warning("Rejected uplink: %s", exc)
        raise _http_error(exc) from exc
    return _decode_raw(decoder, raw)


@router.post("/ingest/lorawan/raw", response_model=DecodeOut)
async def ingest_raw(request: Request, decoder: Decoder = Depends(get_decoder)):
    raw = await request.body()
    return _decode_raw(decoder, raw)


@router.get("/api/modes", response_model=list[ModeOut], summary="List supported work modes")
def list_modes():
    return [
        ModeOut(
            mode=int(layout.mode),
            name=layout.mode.name,
            description=layout.description,
            min_length=layout.min_length,
            fields=layout.names(),
        )
        for layout in LAYOUTS
    ]


@router.get("/api/bands", response_model=list[BandOut], summary="List frequency band codes")
def list_bands():
    return [BandOut(code=code, name=name) for code, name in BANDS.items()]
