from typing import Dict, Iterable, Optional

from ..models import ContentEntry, ExtractedWebContent, ExtractedYouTubeContent


def index_entries(entries: Iterable[ContentEntry]) -> Dict[str, ContentEntry]:
    """Maps each URL to the first API entry that carries it."""
    index = {}
    for entry in entries:
        if entry.url and entry.url not in index:
            index[entry.url] = entry
    return index


def enrich_web(content: ExtractedWebContent, entry: Optional[ContentEntry]) -> ExtractedWebContent:
    if entry is None or not entry.created_time:
        return content
    return content.model_copy(update={"consumed_at": entry.created_time})


def enrich_youtube(content: ExtractedYouTubeContent, entry: Optional[ContentEntry]) -> ExtractedYouTubeContent:
    """Like enrich_web, but the API title also replaces the scraped one."""
    if entry is None:
        return content

    update = {}
    if entry.title:
        update["title"] = entry.title
    if entry.created_time:
        update["consumed_at"] = entry.created_time
    return content.model_copy(update=update) if update else content
