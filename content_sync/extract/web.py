import logging
import re
from typing import Callable, Optional

import httpx

from ..models import ExtractedWebContent, WebMetaData
from .dom import Document, SoupDocument, first_attr, first_non_empty, joined_text
from .http import fetch_html, http_client

logger = logging.getLogger(__name__)

ERROR_TITLE = "Error loading page"
ERROR_CONTENT = "Failed to retrieve content from this page."

NON_CONTENT_SELECTOR = "script, style, noscript, iframe, img, svg, path, head, nav, footer, aside"
HEADING_SELECTOR = "h1, h2, h3, h4, h5, h6"
BODY_SELECTOR = "p, article, section, div, main, span, li, td, th, blockquote, pre, code, figcaption"
MIN_BODY_TEXT_LENGTH = 10

RE_EXTRA_BREAKS = re.compile(r"(\n\s*){3,}")
RE_EXTRA_SPACE = re.compile(r"\s{2,}")


def normalize_content(text: str) -> str:
    text = RE_EXTRA_BREAKS.sub("\n\n", text)
    text = RE_EXTRA_SPACE.sub(" ", text)
    return text.strip()


def extract_meta_data(doc: Document) -> WebMetaData:
    return WebMetaData(
        og_title=first_attr(doc, 'meta[property="og:title"]', "content") or "",
        og_description=first_attr(doc, 'meta[property="og:description"]', "content") or "",
        og_image=first_attr(doc, 'meta[property="og:image"]', "content") or "",
        keywords=first_attr(doc, 'meta[name="keywords"]', "content") or "",
    )


def extract_body_text(doc: Document) -> str:
    """Flattens the page into markdown-ish text.

    Headings are emitted first and body elements after them, so the
    original reading order is not preserved. Mutates ``doc``.
    """
    doc.remove(NON_CONTENT_SELECTOR)

    parts = []
    for heading in doc.select(HEADING_SELECTOR):
        level = int(heading.name[1])
        parts.append("#" * level + " " + heading.text().strip() + "\n\n")

    for element in doc.select(BODY_SELECTOR):
        text = element.text().strip()
        if len(text) > MIN_BODY_TEXT_LENGTH:
            parts.append(text + "\n\n")

    return normalize_content("".join(parts))


def parse_web_page(url: str, html: str, parse: Callable[[str], Document] = SoupDocument) -> ExtractedWebContent:
    doc = parse(html)

    title = joined_text(doc, "title").strip()
    if not title:
        headings = doc.select("h1")
        title = headings[0].text().strip() if headings else ""

    meta_data = extract_meta_data(doc)
    published_date = first_non_empty(
        first_attr(doc, 'meta[property="article:published_time"]', "content"),
        first_attr(doc, 'meta[name="date"]', "content"),
        first_attr(doc, "time", "datetime"),
    )

    return ExtractedWebContent(
        title=title,
        url=url,
        published_date=published_date,
        full_content=extract_body_text(doc),
        meta_data=meta_data,
    )


def fallback_web_content(url: str, error: str) -> ExtractedWebContent:
    return ExtractedWebContent(
        title=ERROR_TITLE,
        url=url,
        published_date=None,
        full_content=ERROR_CONTENT,
        meta_data=WebMetaData(og_title="", og_description="", og_image="", keywords=""),
        error=error,
    )


async def extract_web_page(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    parse: Callable[[str], Document] = SoupDocument,
) -> ExtractedWebContent:
    """Fetches and extracts a web page. Never raises; failures yield a fallback record."""
    try:
        async with http_client(client) as http:
            html = await fetch_html(http, url)
        return parse_web_page(url, html, parse)
    except Exception as e:
        logger.error(f"Error scraping {url}: {e}")
        return fallback_web_content(url, str(e) or type(e).__name__)
