"""
Sensitivity Generator: FastAPI Backend

Run with:
    cd backend
    uvicorn main:app --reload --port 8000

API docs: http://localhost:8000/docs

Requires:
    pip install -e .
    .env file (optional) with SENSITIVITY_CACHE_DIR and/or LOG_LEVEL
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv(Path(__file__).parent / ".env")

from routers import devices, sensitivity  # noqa: E402  (.env must load first)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)

app = FastAPI(
    title="Sensitivity Generator",
    description=(
        "Generates in-game aim sensitivity settings (general, red dot, 2x, 4x, "
        "sniper, free look) from device hardware, play style and experience. "
        "Free and advanced calculator tiers; the advanced tier ramps up over "
        "a 7-day per-session optimization window."
    ),
    version="0.2.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(devices.router)
app.include_router(sensitivity.router)


@app.get("/", tags=["health"])
def root():
    return {
        "app": "Sensitivity Generator",
        "version": "0.2.0",
        "docs": "/docs",
        "endpoints": [
            "/api/v1/sensitivity",
            "/api/v1/sensitivity/optimization/{session_id}",
            "/api/v1/devices/search",
            "/api/v1/devices/brand/{brand}",
            "/api/v1/devices/compare",
            "/api/v1/devices/{device_name}",
        ],
    }


@app.get("/health", tags=["health"])
def health_check():
    return {"status": "ok"}
