# -*- coding: utf-8 -*-
"""
SnapCalorie API

Meal estimation, meal/water logging, daily reports and the virtual day clock.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .clock.api import router as clock_router
from .clock.ticker import ClockTicker
from .config import settings
from .diet.api import router as diet_router
from .goals.api import router as goals_router
from .tracker import get_tracker

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    tracker = app.dependency_overrides.get(get_tracker, get_tracker)()
    ticker = ClockTicker(tracker.reconcile, interval=settings.tick_seconds)
    ticker.start()
    app.state.clock_ticker = ticker
    try:
        yield
    finally:
        await ticker.stop()


app = FastAPI(
    title="SnapCalorie",
    description="AI meal estimation, calorie and hydration tracking",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(clock_router)
app.include_router(diet_router)
app.include_router(goals_router)


@app.get("/api/health")
def health() -> dict:
    return {"status": "ok"}
