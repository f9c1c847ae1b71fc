import logging
from typing import Callable, List, Optional

import httpx

from ..errors import InvalidYouTubeUrlError, TranscriptError
from ..models import ExtractedYouTubeContent, TranscriptSegment, YouTubeMetaData
from .dom import Document, SoupDocument, first_attr, first_non_empty, joined_text
from .http import fetch_html, http_client
from .links import resolve_video_id
from .transcript import fetch_transcript

logger = logging.getLogger(__name__)

ERROR_TITLE = "Error loading YouTube video"
ERROR_DESCRIPTION = "Failed to retrieve content from this YouTube video."
TITLE_SUFFIX = " - YouTube"

CHANNEL_SELECTOR = '[itemprop="author"] [itemprop="name"], #owner-name a'
FULL_DESCRIPTION_SELECTOR = "#description-inline-expander, #description"


def extract_channel_name(doc: Document) -> str:
    nodes = doc.select(CHANNEL_SELECTOR)
    if not nodes:
        return ""
    # Structured data uses <link itemprop="name" content="...">, which has no text
    return (nodes[0].text().strip() or nodes[0].attr("content") or "").strip()


def extract_title(doc: Document) -> str:
    title = joined_text(doc, "title").strip()
    if title.endswith(TITLE_SUFFIX):
        title = title[: -len(TITLE_SUFFIX)]
    return title.strip()


def parse_youtube_page(
    url: str,
    video_id: str,
    html: str,
    parse: Callable[[str], Document] = SoupDocument,
) -> ExtractedYouTubeContent:
    doc = parse(html)

    publish_date = first_non_empty(
        first_attr(doc, 'meta[itemprop="datePublished"]', "content"),
        first_attr(doc, 'meta[property="article:published_time"]', "content"),
    )

    description = first_non_empty(
        first_attr(doc, 'meta[name="description"]', "content"),
        first_attr(doc, 'meta[property="og:description"]', "content"),
    ) or ""
    full_description = joined_text(doc, FULL_DESCRIPTION_SELECTOR).strip()
    if full_description:
        description = full_description

    meta_data = YouTubeMetaData(
        og_title=first_attr(doc, 'meta[property="og:title"]', "content") or "",
        og_description=first_attr(doc, 'meta[property="og:description"]', "content") or "",
        og_image=first_attr(doc, 'meta[property="og:image"]', "content") or "",
        keywords=first_attr(doc, 'meta[name="keywords"]', "content") or "",
        view_count=first_attr(doc, 'meta[itemprop="interactionCount"]', "content") or "",
        like_count="",  # not exposed in static markup
        duration=first_attr(doc, 'meta[itemprop="duration"]', "content") or "",
    )
    view_count_text = joined_text(doc, ".view-count").strip()
    if view_count_text:
        meta_data.view_count = view_count_text

    return ExtractedYouTubeContent(
        title=extract_title(doc),
        url=url,
        video_id=video_id,
        channel_name=extract_channel_name(doc),
        publish_date=publish_date,
        description=description,
        meta_data=meta_data,
    )


def fallback_youtube_content(url: str, error: str) -> ExtractedYouTubeContent:
    try:
        video_id = resolve_video_id(url)
    except InvalidYouTubeUrlError:
        video_id = ""

    return ExtractedYouTubeContent(
        title=ERROR_TITLE,
        url=url,
        video_id=video_id,
        channel_name="",
        publish_date=None,
        description=ERROR_DESCRIPTION,
        error=error,
    )


async def attach_transcript(url: str, video_id: str, client: httpx.AsyncClient) -> Optional[List[TranscriptSegment]]:
    """Returns the transcript, or None when it cannot be read for any reason."""
    try:
        return await fetch_transcript(video_id, client=client)
    except TranscriptError as e:
        logger.warning(f"No transcript for {url}: {e}")
    except Exception as e:
        logger.warning(f"Could not fetch transcript for {url}: {type(e).__name__}: {e}")
    return None


async def extract_youtube_page(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    parse: Callable[[str], Document] = SoupDocument,
    with_transcript: bool = True,
) -> ExtractedYouTubeContent:
    """Fetches and extracts a YouTube watch page.

    Never raises. Page failures yield a fallback record; a missing
    transcript leaves ``transcript`` unset.
    """
    async with http_client(client) as http:
        try:
            video_id = resolve_video_id(url)
            html = await fetch_html(http, url)
            content = parse_youtube_page(url, video_id, html, parse)
        except Exception as e:
            logger.error(f"Error extracting YouTube content from {url}: {e}")
            return fallback_youtube_content(url, str(e) or type(e).__name__)

        if with_transcript:
            content.transcript = await attach_transcript(url, video_id, http)

    return content
