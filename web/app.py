from contextlib import asynccontextmanager
from typing import Dict, Optional
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from bf6stats.api_client import TrackerAPIClient
from bf6stats.platforms import PLATFORM_SEGMENTS, UnknownPlatformError
from bf6stats.scraper import (
    BrowserFetcher,
    ResponseParseError,
    RetrievalError,
    ScraperBlockedError,
    UpstreamStatusError,
)
from bf6stats.service import StatsService

logger = logging.getLogger(__name__)

fetcher = BrowserFetcher()
api_client = TrackerAPIClient(fetcher)
service = StatsService(api_client)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    await fetcher.close()


app = FastAPI(title="bf6stats", lifespan=lifespan)


def _forwarded_headers(request: Request) -> Dict[str, str]:
    """Browser headers for the upstream call, carrying over what the caller sent."""
    return api_client.build_headers(
        accept=request.headers.get("accept"),
        accept_language=request.headers.get("accept-language"),
        user_agent=request.headers.get("user-agent"),
        cookie=request.headers.get("cookie"),
        cf_bm_token=request.query_params.get("_cf_bm_token"),
    )


@app.get("/api/platforms")
async def list_platforms():
    return {"platforms": PLATFORM_SEGMENTS}


@app.get("/api/matches")
async def get_matches(request: Request, playerId: Optional[str] = None, platform: str = "origin"):
    if not playerId:
        return JSONResponse({"error": "playerId is required"}, status_code=400)

    try:
        payload = await api_client.get_matches(playerId, platform, headers=_forwarded_headers(request))
    except UnknownPlatformError as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except UpstreamStatusError as e:
        return JSONResponse(
            {"error": f"Failed to fetch matches: {e.status_text}"},
            status_code=e.status,
        )
    except Exception:
        logger.exception("Error fetching matches")
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    return payload


@app.get("/api/overview")
async def get_overview(request: Request, playerId: Optional[str] = None, platform: str = "origin"):
    if not playerId:
        raise HTTPException(status_code=400, detail="playerId is required")

    try:
        overview = await service.get_player_overview(playerId, platform, headers=_forwarded_headers(request))
    except UnknownPlatformError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UpstreamStatusError as e:
        raise HTTPException(status_code=e.status, detail=f"Failed to fetch matches: {e.status_text}")
    except ScraperBlockedError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except ResponseParseError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except RetrievalError as e:
        raise HTTPException(status_code=504, detail=str(e))

    return overview.to_dict()


@app.get("/api/dashboard")
async def get_dashboard(request: Request, playerId: Optional[str] = None, platform: str = "origin"):
    if not playerId:
        raise HTTPException(status_code=400, detail="playerId is required")

    try:
        dashboard = await service.get_dashboard(playerId, platform, headers=_forwarded_headers(request))
    except UnknownPlatformError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UpstreamStatusError as e:
        raise HTTPException(status_code=e.status, detail=f"Failed to load dashboard: {e.status_text}")
    except (RetrievalError, ResponseParseError) as e:
        raise HTTPException(status_code=502, detail=f"Failed to load dashboard: {str(e)}")

    return dashboard.to_dict()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    print("Starting bf6stats server...")
    print("Open http://localhost:5000/api/overview?playerId=<id> in your browser")
    uvicorn.run(app, host="127.0.0.1", port=5000)
