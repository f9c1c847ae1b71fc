from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

import httpx

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_4) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/85.0.4183.83 Safari/537.36"
)
REQUEST_TIMEOUT_SEC = 30


@asynccontextmanager
async def http_client(client: Optional[httpx.AsyncClient] = None) -> AsyncIterator[httpx.AsyncClient]:
    """Yields the given client, or a short-lived one closed on exit."""
    if client is not None:
        yield client
        return

    async with httpx.AsyncClient(
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
        timeout=REQUEST_TIMEOUT_SEC,
    ) as owned:
        yield owned


async def fetch_html(
    client: httpx.AsyncClient,
    url: str,
    headers: Optional[Dict[str, str]] = None,
    check: bool = True,
) -> str:
    response = await client.get(url, headers=headers)
    if check:
        response.raise_for_status()
    return response.text
