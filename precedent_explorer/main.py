"""FastAPI backend for the Precedent Explorer."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .api import precedents_router
from .dependencies import build_controller
from .http_pool import check_http_client_health, close_http_client, init_http_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config.configure_logging()
    await init_http_client()
    app.state.controller = build_controller()
    logger.info("Precedent Explorer API started")
    try:
        yield
    finally:
        await app.state.controller.shutdown()
        await close_http_client()
        logger.info("Precedent Explorer API stopped")


app = FastAPI(title="Precedent Explorer API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(precedents_router)


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "precedent-explorer",
        "http_client": check_http_client_health(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("precedent_explorer.main:app", host="0.0.0.0", port=config.BACKEND_PORT)
