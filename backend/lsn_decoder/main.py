import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lsn_decoder.config import load_settings
from lsn_decoder.routers import decode

settings = load_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="LSN payload decoder")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(decode.router)


@app.get("/health")
def health():
    return {"ok": True}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("lsn_decoder.main:app", host=settings.host, port=settings.port, reload=True)
