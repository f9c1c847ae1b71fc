import re
from typing import Iterable

from ..errors import InvalidYouTubeUrlError
from ..models import ClassifiedLinks

YOUTUBE_HOST = "www.youtube.com"

# Tried in order, first match wins
VIDEO_ID_PATTERNS = [
    ("watch", re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([^&?/#]+)")),
    ("short", re.compile(r"youtu\.be/([^&?/#]+)")),
    ("embed", re.compile(r"youtube\.com/embed/([^&?/#]+)")),
    ("shorts", re.compile(r"youtube\.com/shorts/([^&?/#]+)")),
]


def is_youtube_url(url: str) -> bool:
    return YOUTUBE_HOST in url


def classify_links(urls: Iterable[str]) -> ClassifiedLinks:
    """Splits URLs into web and youtube buckets, keeping input order in each."""
    links = ClassifiedLinks()
    for url in urls:
        if is_youtube_url(url):
            links.youtube.append(url)
        else:
            links.web.append(url)
    return links


def resolve_video_id(url: str) -> str:
    for _, pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    raise InvalidYouTubeUrlError(url)


def watch_url(video_id: str) -> str:
    return f"https://{YOUTUBE_HOST}/watch?v={video_id}"
