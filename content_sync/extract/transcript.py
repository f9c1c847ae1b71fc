"""YouTube caption retrieval by scraping the watch page.

The caption track list is read out of the JSON the watch page embeds
between the ``"captions":`` and ``,"videoDetails`` markers. There is no
schema contract for this; a second decode path is tried before giving up.
"""
import html
import json
import logging
import re
from typing import List, Optional

import httpx

from ..errors import (
    TooManyRequestsError,
    TranscriptDisabledError,
    TranscriptLanguageUnavailableError,
    TranscriptNotAvailableError,
    VideoUnavailableError,
)
from ..models import TranscriptSegment
from .http import USER_AGENT, fetch_html, http_client
from .links import resolve_video_id, watch_url

logger = logging.getLogger(__name__)

CAPTIONS_MARKER = '"captions":'
VIDEO_DETAILS_MARKER = ',"videoDetails'
CAPTCHA_MARKER = 'class="g-recaptcha"'
PLAYABILITY_MARKER = '"playabilityStatus":'

RE_XML_TRANSCRIPT = re.compile(r'<text start="([^"]*)" dur="([^"]*)">([^<]*)</text>')


def _request_headers(lang: Optional[str]) -> dict:
    headers = {"User-Agent": USER_AGENT}
    if lang:
        headers["Accept-Language"] = lang
    return headers


def _decode_captions(fragment: str) -> Optional[dict]:
    try:
        value = json.loads(fragment.split(VIDEO_DETAILS_MARKER)[0].replace("\n", "", 1))
        if isinstance(value, dict):
            return value
    except ValueError:
        pass

    try:
        value, _ = json.JSONDecoder().raw_decode(fragment.lstrip())
    except ValueError:
        return None
    logger.warning("Caption JSON needed the fallback decoder")
    return value if isinstance(value, dict) else None


def parse_caption_tracks(page: str, video_id: str) -> List[dict]:
    """Returns the caption tracks embedded in a watch page, in page order."""
    parts = page.split(CAPTIONS_MARKER, 1)

    if len(parts) <= 1:
        if CAPTCHA_MARKER in page:
            raise TooManyRequestsError(video_id)
        if PLAYABILITY_MARKER not in page:
            raise VideoUnavailableError(video_id)
        raise TranscriptDisabledError(video_id)

    captions = _decode_captions(parts[1]) or {}
    renderer = captions.get("playerCaptionsTracklistRenderer")
    if not isinstance(renderer, dict) or not renderer:
        raise TranscriptDisabledError(video_id)

    tracks = renderer.get("captionTracks")
    if not isinstance(tracks, list):
        tracks = []
    tracks = [track for track in tracks if isinstance(track, dict)]
    if not tracks:
        raise TranscriptNotAvailableError(video_id)
    return tracks


def select_track(tracks: List[dict], video_id: str, lang: Optional[str] = None) -> dict:
    if not lang:
        return tracks[0]

    for track in tracks:
        if track.get("languageCode") == lang:
            return track
    raise TranscriptLanguageUnavailableError(
        lang, [track.get("languageCode", "") for track in tracks], video_id
    )


def parse_timed_text(xml: str, lang: Optional[str] = None) -> List[TranscriptSegment]:
    segments = []
    for start, dur, text in RE_XML_TRANSCRIPT.findall(xml):
        try:
            offset, duration = float(start), float(dur)
        except ValueError:
            logger.warning(f"Skipping caption with bad timing start={start!r} dur={dur!r}")
            continue
        segments.append(TranscriptSegment(text=html.unescape(text), duration=duration, offset=offset, lang=lang))
    return segments


async def fetch_transcript(
    video: str,
    lang: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[TranscriptSegment]:
    """Fetches the caption track of a video.

    ``video`` is a video ID or any supported YouTube URL; input without a
    slash is taken as an ID as is. Raises a
    ``TranscriptError`` subclass describing why no transcript could be read.
    """
    video_id = resolve_video_id(video) if "/" in video else video
    headers = _request_headers(lang)

    async with http_client(client) as http:
        page = await fetch_html(http, watch_url(video_id), headers=headers, check=False)
        tracks = parse_caption_tracks(page, video_id)
        track = select_track(tracks, video_id, lang)

        base_url = track.get("baseUrl")
        if not base_url:
            raise TranscriptNotAvailableError(video_id)

        response = await http.get(base_url, headers=headers)
        if not response.is_success:
            raise TranscriptNotAvailableError(video_id)

    return parse_timed_text(response.text, lang or track.get("languageCode"))
