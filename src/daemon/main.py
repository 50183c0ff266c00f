"""
SuperAI Daemon - FastAPI service that runs exchanges on request.

Each POST /send runs one complete exchange (own browsing context, guaranteed
teardown). Exchanges are serialized: the remote account has one set of
threads, and concurrent sessions would race on it.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from pydantic import BaseModel, Field

from superai import __version__
from superai.config import load_config
from superai.envelope import Envelope, FaultCode
from superai.logging_setup import configure_logging
from superai.session import run_exchange

logger = logging.getLogger(__name__)

VERSION = __version__

# Global state
daemon_state: dict[str, Any] = {
    "config": None,
    "lock": None,
    "startup_time": None,
    "browser_factory": None,  # None -> Playwright
}


# --- Request/Response Models ---


class SendRequest(BaseModel):
    """Request model for /send endpoint."""

    thread: str | int = Field("new", description="'new' or a 1-based thread number")
    model: str = Field(..., description="Model key (gemini, llama, chatgpt)")
    message: str = Field(..., min_length=1, description="Message to send")


class EnvelopeResponse(BaseModel):
    """Response model for /send endpoint."""

    success: bool
    message: str
    prompt: Any = None
    data: dict[str, Any] | None = None
    code: str | None = None


class HealthResponse(BaseModel):
    """Response model for /healthz endpoint."""

    status: str
    version: str
    uptime_s: float


# --- Lifecycle Management ---


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager - handles startup and shutdown.
    """
    # --- STARTUP ---
    config = load_config()
    configure_logging(config.log_level)

    logger.info("=" * 80)
    logger.info("SuperAI Daemon v%s starting…", VERSION)
    logger.info("=" * 80)

    daemon_state["config"] = config
    daemon_state["lock"] = asyncio.Lock()
    daemon_state["startup_time"] = time.time()
    logger.info("Configuration loaded (target %s)", config.url)

    yield

    # --- SHUTDOWN ---
    logger.info("SuperAI Daemon shutting down…")
    daemon_state["config"] = None
    daemon_state["lock"] = None
    logger.info("Shutdown complete")


# --- FastAPI Application ---

app = FastAPI(
    title="SuperAI Daemon",
    version=VERSION,
    description="Runs SuperAI chat exchanges over HTTP",
    lifespan=lifespan,
)


# --- Endpoints ---


@app.get("/healthz", response_model=HealthResponse)
async def healthz():
    """Health check endpoint."""
    uptime = time.time() - daemon_state["startup_time"] if daemon_state["startup_time"] else 0
    return HealthResponse(status="ok", version=VERSION, uptime_s=uptime)


@app.post("/send", response_model=EnvelopeResponse)
async def send(request: SendRequest):
    """
    Run one exchange and return its Envelope.

    Failures are reported in the body (success=false, code), never as HTTP errors.
    """
    lock: asyncio.Lock = daemon_state["lock"]
    try:
        async with lock:
            logger.info("Exchange: thread=%s model=%s", request.thread, request.model)
            result = await run_exchange(
                request.thread,
                request.model,
                request.message,
                config=daemon_state["config"],
                browser_factory=daemon_state["browser_factory"],
            )
    except Exception as e:
        logger.error("Error running exchange: %s", e, exc_info=True)
        result = Envelope.fail(
            FaultCode.UNEXPECTED_FAULT, f"Internal error: {e}", prompt=request.message
        )

    return EnvelopeResponse(**result.to_dict())


# --- Main Entry Point ---

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000, log_level="info")
