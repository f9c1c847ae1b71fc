import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_CONFIG = "config/settings.yaml"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


class Settings(BaseModel):
    # API
    api_url: str = "https://open-source-content.xyz/v1"

    # Storage and logs
    db_path: str = "data/content_database.sqlite"
    log_path: str = "logs/sync_logs.txt"
    log_level: str = "INFO"

    # Scraping
    max_concurrent_scrapes: int = Field(3, ge=1)
    scrape_delay_ms: int = Field(1000, ge=0)

    # Cron
    sync_schedule: str = "0 2 * * *"

    # API fetch
    fetch_retry_attempts: int = Field(5, ge=1)
    fetch_delay_ms: int = Field(1000, ge=0)

    dry_run: bool = False


def load_settings(path: Optional[str] = DEFAULT_CONFIG) -> Settings:
    """Builds settings from the YAML file, then lets env vars override each key."""
    load_dotenv()

    values = {}
    if path and os.path.exists(path):
        with open(path, "r") as f:
            values = yaml.safe_load(f) or {}

    for name in Settings.model_fields:
        env_value = os.getenv(name.upper())
        if env_value is not None:
            values[name] = env_value

    return Settings(**values)


def configure_logging(settings: Settings) -> None:
    log_file = Path(settings.log_path)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(), logging.FileHandler(log_file)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
