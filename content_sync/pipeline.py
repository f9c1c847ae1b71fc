"""Runs classification, extraction and enrichment over API entries.

``extract_content`` is the one-shot path: every URL in a category is
fetched at once and the two categories run side by side. ``SyncService``
is the backfill path: it records entries in the store, then scrapes the
new, changed or still unscraped URLs in delayed, fixed-size batches.
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

import httpx

from .extract.content_api import ContentApiClient
from .extract.http import http_client
from .extract.links import classify_links, is_youtube_url
from .extract.web import extract_web_page
from .extract.youtube import extract_youtube_page
from .load.sqlite import ContentStore
from .models import ContentEntry, EnrichedRecord, SyncResult
from .transform.enrich import enrich_web, enrich_youtube, index_entries

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def extract_content(
    entries: Sequence[ContentEntry],
    client: Optional[httpx.AsyncClient] = None,
    with_transcript: bool = True,
) -> List[EnrichedRecord]:
    """Extracts every entry with a URL. Web records come first, then YouTube."""
    links = classify_links(entry.url for entry in entries if entry.url)
    by_url = index_entries(entries)
    logger.info(f"Extracting {len(links.web)} web and {len(links.youtube)} YouTube links")

    async with http_client(client) as http:
        web_results, youtube_results = await asyncio.gather(
            asyncio.gather(*(extract_web_page(url, client=http) for url in links.web)),
            asyncio.gather(*(
                extract_youtube_page(url, client=http, with_transcript=with_transcript)
                for url in links.youtube
            )),
        )

    records: List[EnrichedRecord] = []
    records.extend(enrich_web(r, by_url.get(r.url)) for r in web_results)
    records.extend(enrich_youtube(r, by_url.get(r.url)) for r in youtube_results)
    return records


async def scrape_in_batches(
    urls: Sequence[str],
    scrape: Callable[[str], Awaitable[T]],
    batch_size: int,
    delay_ms: int = 0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> List[T]:
    """Scrapes at most ``batch_size`` URLs at a time, pausing between batches."""
    results: List[T] = []
    total_batches = (len(urls) + batch_size - 1) // batch_size

    for i in range(0, len(urls), batch_size):
        batch = urls[i:i + batch_size]
        logger.info(f"Processing scrape batch {i // batch_size + 1}/{total_batches} ({len(batch)} URLs)")
        results.extend(await asyncio.gather(*(scrape(url) for url in batch)))

        if i + batch_size < len(urls) and delay_ms:
            await sleep(delay_ms / 1000)

    return results


class SyncService:
    def __init__(
        self,
        api: ContentApiClient,
        store: ContentStore,
        max_concurrent_scrapes: int = 3,
        scrape_delay_ms: int = 1000,
        dry_run: bool = False,
    ):
        self.api = api
        self.store = store
        self.max_concurrent_scrapes = max_concurrent_scrapes
        self.scrape_delay_ms = scrape_delay_ms
        self.dry_run = dry_run

    async def scrape_url(self, url: str, client: Optional[httpx.AsyncClient] = None) -> EnrichedRecord:
        if is_youtube_url(url):
            return await extract_youtube_page(url, client=client)
        return await extract_web_page(url, client=client)

    def register_entries(self, entries: Sequence[ContentEntry], result: SyncResult) -> List[str]:
        """Stores entries and returns the URLs to scrape: new, retitled, or never scraped."""
        to_scrape = []
        for entry in entries:
            if not entry.url:
                continue
            status = "created" if self.dry_run else self.store.upsert_entry(entry)
            if status == "created":
                result.added += 1
                to_scrape.append(entry.url)
            elif status == "updated":
                result.updated += 1
                to_scrape.append(entry.url)
            elif status == "pending":
                to_scrape.append(entry.url)
        return to_scrape

    async def sync(self) -> SyncResult:
        logger.info(f"Starting content sync (dry_run={self.dry_run})")
        result = SyncResult()

        entries = await asyncio.to_thread(self.api.fetch_all_entries)
        by_url = index_entries(entries)
        to_scrape = self.register_entries(entries, result)
        logger.info(f"Base sync completed. Added: {result.added}, Updated: {result.updated}")
        logger.info(f"Starting scraping for {len(to_scrape)} URLs")

        async with http_client() as http:
            async def scrape(url: str) -> EnrichedRecord:
                record = await self.scrape_url(url, client=http)
                entry = by_url.get(url)
                if is_youtube_url(url):
                    return enrich_youtube(record, entry)
                return enrich_web(record, entry)

            records = await scrape_in_batches(
                to_scrape, scrape, self.max_concurrent_scrapes, self.scrape_delay_ms
            )

        for record in records:
            if not record.ok:
                result.errors += 1
                logger.error(f"Error scraping {record.url}: {record.error}")
                continue
            result.scraped += 1
            if not self.dry_run:
                self.store.save_record(record)

        if not self.dry_run:
            self.store.record_sync(result)

        logger.info(
            f"Sync and scrape completed. Added: {result.added}, Updated: {result.updated}, "
            f"Scraped: {result.scraped}, Scrape errors: {result.errors}"
        )
        return result
