import asyncio
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import pipeline
from .config import Settings
from .extract.content_api import ContentApiClient

logger = logging.getLogger(__name__)

# Sent on every response, not only on cross-origin requests
CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}


def create_app(settings: Settings, api_client: Optional[ContentApiClient] = None) -> FastAPI:
    api = api_client or ContentApiClient(
        settings.api_url, settings.fetch_retry_attempts, settings.fetch_delay_ms
    )

    app = FastAPI(title="content-sync")
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    @app.get("/")
    async def extract():
        try:
            # Only the first page; pagination is left to the sync job
            page = await asyncio.to_thread(api.fetch_page)
            records = await pipeline.extract_content(page.entries)
            return JSONResponse(
                {"extractedContent": [record.to_json() for record in records]},
                headers=CORS_HEADERS,
            )
        except Exception as e:
            logger.exception("Error extracting content")
            return JSONResponse(
                {"error": "Error extracting content", "message": str(e)},
                status_code=500,
                headers=CORS_HEADERS,
            )

    return app
