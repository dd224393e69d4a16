"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marquee.api.routes import health, notify, showtimes
from marquee.config import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create FastAPI app
app = FastAPI(
    title="Marquee API",
    description="Showtime aggregator for New York repertory cinemas",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(showtimes.router, prefix="/api", tags=["showtimes"])
app.include_router(notify.router, prefix="/api", tags=["notify"])


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
