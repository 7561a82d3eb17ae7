"""Mood director server entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from director.config import settings
from director.llm.groq_client import GroqClient
from director.routers.decide import router as decide_router

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start/stop the LLM client."""
    llm = GroqClient()
    await llm.start()
    app.state.llm = llm
    if llm.configured:
        log.info("mood director using %s model %s", llm.backend_name, llm.model_name)
    else:
        log.warning("GROQ_API_KEY not set; answering with heuristic only")

    yield

    await llm.close()


app = FastAPI(
    title="LunaFace Mood Director",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(decide_router)


@app.get("/health")
async def health():
    """Liveness check; the director always answers, with or without an LLM."""
    llm = getattr(app.state, "llm", None)
    return JSONResponse(
        {
            "status": "ok",
            "llm_enabled": bool(llm is not None and llm.configured),
            "llm": llm.debug_snapshot() if llm is not None else None,
        }
    )


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
    )
    uvicorn.run(
        "director.main:app",
        host=settings.host,
        port=settings.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
