"""Health check endpoint."""

from fastapi import APIRouter

from marquee.scrapers import SCRAPER_REGISTRY

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check() -> dict[str, str | list[str]]:
    """
    Report that the API is up and which theaters it aggregates.

    No scraping happens here; the theater list comes from the registry.
    """
    return {"status": "ok", "theaters": [t.value for t in SCRAPER_REGISTRY]}
