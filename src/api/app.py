"""
FastAPI application exposing the weather layer.

Endpoints:
    GET /weather            — Current conditions + daily forecast (never 5xx on upstream failure)
    GET /advisories         — Same snapshot plus rule-based farming advisories
    GET /locations/search   — Look up a place by name
    GET /health             — Health check
"""

import asyncio
import sys
import time
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

try:
    from prometheus_client import Counter, Histogram, generate_latest
    from fastapi.responses import Response as PrometheusResponse
    PROMETHEUS_AVAILABLE = True
except ImportError:
    PROMETHEUS_AVAILABLE = False

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.api.schemas import (
    AdvisoryOut, AdvisoryResponse, HealthResponse, LocationOut,
    LocationSearchResponse, WeatherResponse,
)
from src.advisory.engine import advise
from src.location.models import Coordinate
from src.weather.config import WeatherConfig
from src.weather.controller import DegradationController
from src.weather.models import WeatherSnapshot
from src.weather.provider import ProviderFailure

# ---- App setup ----
app = FastAPI(
    title="Farm Weather API",
    description="Always-available weather and farming advisories",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- Prometheus metrics ----
if PROMETHEUS_AVAILABLE:
    FETCH_COUNT = Counter(
        "weather_fetch_total", "Weather snapshots served, by data source",
        ["source"],
    )
    FETCH_LATENCY = Histogram(
        "weather_fetch_latency_seconds", "Weather fetch latency",
        buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    )

# ---- Global controller ----
controller: DegradationController = None
api_version = "1.0.0"


def load_controller():
    """Build the controller from environment configuration."""
    global controller
    controller = DegradationController(WeatherConfig.from_env())


@app.on_event("startup")
async def startup_event():
    if controller is None:
        load_controller()


def _coordinate(lat: Optional[float], lon: Optional[float]) -> Optional[Coordinate]:
    if lat is None and lon is None:
        return None
    if lat is None or lon is None:
        raise HTTPException(status_code=422, detail="Provide both lat and lon, or neither")
    return Coordinate(lat, lon)


async def _snapshot(lat: Optional[float], lon: Optional[float]) -> WeatherSnapshot:
    coord = _coordinate(lat, lon)
    start_time = time.time()
    snapshot = await controller.fetch(coord)
    if PROMETHEUS_AVAILABLE:
        FETCH_LATENCY.observe(time.time() - start_time)
        FETCH_COUNT.labels(source=snapshot.source.value).inc()
    return snapshot


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    configured = controller.config.has_api_key
    cached = controller.cached_snapshot
    return HealthResponse(
        status="healthy" if configured else "degraded",
        provider_configured=configured,
        last_live_update=cached.last_updated if cached else None,
        version=api_version,
    )


@app.get("/weather", response_model=WeatherResponse)
async def weather(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
):
    """
    Weather for lat/lon, or for the resolved device location when omitted.
    Check ``source`` to tell live data from cached or synthetic data.
    """
    snapshot = await _snapshot(lat, lon)
    return WeatherResponse(**snapshot.to_dict())


@app.get("/advisories", response_model=AdvisoryResponse)
async def advisories(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
):
    """Weather snapshot plus farming advisories derived from it."""
    snapshot = await _snapshot(lat, lon)
    return AdvisoryResponse(
        weather=WeatherResponse(**snapshot.to_dict()),
        advisories=[AdvisoryOut(**a.to_dict()) for a in advise(snapshot)],
    )


@app.get("/locations/search", response_model=LocationSearchResponse)
async def search_locations(q: str = Query(..., description="Place name, e.g. 'Nashik' or 'Pune,IN'")):
    """Search places by name; pass a result's lat/lon to /weather."""
    try:
        results = await asyncio.to_thread(controller.client.search_city, q)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ProviderFailure as e:
        raise HTTPException(status_code=502, detail=f"Location search failed: {e}")
    return LocationSearchResponse(
        query=q,
        results=[LocationOut(**r.to_dict()) for r in results],
    )


# ---- Prometheus metrics endpoint ----
if PROMETHEUS_AVAILABLE:
    @app.get("/metrics")
    async def metrics():
        return PrometheusResponse(
            content=generate_latest(),
            media_type="text/plain",
        )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
