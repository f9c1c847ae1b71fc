import asyncio
import json
import logging
from typing import List, Optional

import typer

from content_sync.config import DEFAULT_CONFIG, Settings, configure_logging, load_settings
from content_sync.extract.content_api import ContentApiClient
from content_sync.load.sqlite import ContentStore
from content_sync.models import ContentEntry, SyncResult
from content_sync.pipeline import SyncService, extract_content

app = typer.Typer(help="Extract web pages and YouTube videos listed by the content API.")
logger = logging.getLogger("content_sync")

ConfigOption = typer.Option(DEFAULT_CONFIG, "--config", "-c", help="YAML settings file")


def _setup(config: str) -> Settings:
    settings = load_settings(config)
    configure_logging(settings)
    return settings


def _api(settings: Settings) -> ContentApiClient:
    return ContentApiClient(settings.api_url, settings.fetch_retry_attempts, settings.fetch_delay_ms)


def _build_sync_service(settings: Settings) -> SyncService:
    store = ContentStore(settings.db_path)
    if not settings.dry_run:
        store.init_db()
    return SyncService(
        _api(settings),
        store,
        max_concurrent_scrapes=settings.max_concurrent_scrapes,
        scrape_delay_ms=settings.scrape_delay_ms,
        dry_run=settings.dry_run,
    )


def print_summary(result: SyncResult, dry_run: bool):
    print("\n=========================")
    print("--- Sync Summary ---")
    print("=========================")
    print(f"Added:           {result.added}")
    print(f"Updated:         {result.updated}")
    print(f"Scraped:         {result.scraped}")
    print(f"Errors:          {result.errors}")
    if dry_run:
        print("Dry Run:         nothing was written")
    print("=========================")


@app.command()
def extract(
    urls: Optional[List[str]] = typer.Argument(None, help="URLs to extract instead of the API listing"),
    save: bool = typer.Option(False, help="Also upsert the results into the database"),
    transcripts: bool = typer.Option(True, help="Fetch YouTube transcripts"),
    config: str = ConfigOption,
):
    """Run the one-shot extraction and print the records as JSON."""
    settings = _setup(config)

    if urls:
        entries = [ContentEntry(url=url) for url in urls]
    else:
        entries = _api(settings).fetch_page().entries

    records = asyncio.run(extract_content(entries, with_transcript=transcripts))

    if save:
        store = ContentStore(settings.db_path)
        store.init_db()
        for record in records:
            if record.ok:
                store.save_record(record)
        store.close()

    print(json.dumps({"extractedContent": [r.to_json() for r in records]}, indent=2, ensure_ascii=False))


@app.command()
def sync(config: str = ConfigOption):
    """Fetch all API entries and scrape new or changed URLs in batches."""
    settings = _setup(config)
    service = _build_sync_service(settings)
    try:
        result = asyncio.run(service.sync())
    finally:
        service.store.close()
    print_summary(result, settings.dry_run)


@app.command()
def schedule(config: str = ConfigOption):
    """Run the batch sync on the configured cron schedule."""
    from apscheduler.schedulers.asyncio import AsyncIOScheduler
    from apscheduler.triggers.cron import CronTrigger

    settings = _setup(config)
    service = _build_sync_service(settings)

    async def run_sync():
        try:
            result = await service.sync()
            print_summary(result, settings.dry_run)
        except Exception:
            logger.exception("Scheduled sync failed")

    async def run_forever():
        scheduler = AsyncIOScheduler()
        scheduler.add_job(run_sync, CronTrigger.from_crontab(settings.sync_schedule))
        scheduler.start()
        logger.info(f"Sync scheduled with cron expression '{settings.sync_schedule}'")
        await asyncio.Event().wait()

    try:
        asyncio.run(run_forever())
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped")
    finally:
        service.store.close()


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1"),
    port: int = typer.Option(8000),
    config: str = ConfigOption,
):
    """Serve the HTTP trigger: GET / returns freshly extracted content."""
    import uvicorn

    from content_sync.server import create_app

    settings = _setup(config)
    uvicorn.run(create_app(settings), host=host, port=port)


if __name__ == "__main__":
    app()
