"""
Scrape endpoint: auto-fill a job posting form from a pasted URL.

The client only ever sees "Missing URL" (400) or one generic failure (500);
fetch and parse causes go to the log.
"""
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.rate_limit import limiter, RATE_LIMIT_SCRAPE
from core.net import HTTPClient, get_page_fetcher
from metrics import record_scrape
from pipeline.errors import FetchError, ParseError, ValidationError
from pipeline.scraper import require_url, scrape_job_posting

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["scrape"])

MISSING_URL_ERROR = "Missing URL"
SCRAPE_FAILED_ERROR = "Failed to parse job posting."


async def _read_payload(request: Request):
    body = await request.body()
    if not body:
        return {}
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}


@router.post("/scrape")
@limiter.limit(RATE_LIMIT_SCRAPE)
async def scrape(request: Request, fetcher: HTTPClient = Depends(get_page_fetcher)):
    """
    Fetch a job posting page and extract title, company and location.

    Body: {"url": str}

    Returns:
        200 {title, company, location}
        400 {error: "Missing URL"}
        500 {error: "Failed to parse job posting."}
    """
    payload = await _read_payload(request)

    try:
        url = require_url(payload)
    except ValidationError:
        record_scrape("missing_url")
        return JSONResponse(status_code=400, content={"error": MISSING_URL_ERROR})

    try:
        result = await scrape_job_posting(url, fetcher)
    except FetchError as e:
        record_scrape("fetch_error")
        logger.error(f"[scrape] Fetch failed for {url}: {e}")
        return JSONResponse(status_code=500, content={"error": SCRAPE_FAILED_ERROR})
    except ParseError as e:
        record_scrape("parse_error")
        logger.error(f"[scrape] Parse failed for {url}: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": SCRAPE_FAILED_ERROR})
    except Exception as e:
        record_scrape("error")
        logger.error(f"[scrape] Unexpected failure for {url}: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": SCRAPE_FAILED_ERROR})

    record_scrape("success")
    return result.to_dict()
