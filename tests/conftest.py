"""Shared fixtures: canned YouTube pages and caption documents."""
import pytest

VIDEO_ID = "abc12345678"
WATCH_URL = f"https://www.youtube.com/watch?v={VIDEO_ID}"
EN_TRACK_URL = f"https://www.youtube.com/api/timedtext?v={VIDEO_ID}&lang=en"
DE_TRACK_URL = f"https://www.youtube.com/api/timedtext?v={VIDEO_ID}&lang=de"


def _player_script(body: str) -> str:
    return f"<html><head><title>Great Video - YouTube</title></head><body><script>var ytInitialPlayerResponse = {body};</script></body></html>"


@pytest.fixture
def video_id():
    return VIDEO_ID


@pytest.fixture
def watch_url():
    return WATCH_URL


@pytest.fixture
def captions_page():
    return _player_script(
        '{"playabilityStatus":{"status":"OK"},'
        '"captions":{"playerCaptionsTracklistRenderer":{"captionTracks":['
        f'{{"baseUrl":"{EN_TRACK_URL}","languageCode":"en"}},'
        f'{{"baseUrl":"{DE_TRACK_URL}","languageCode":"de"}}'
        ']}},"videoDetails":{"videoId":"' + VIDEO_ID + '"}}'
    )


@pytest.fixture
def no_captions_page():
    return _player_script('{"playabilityStatus":{"status":"OK"},"videoDetails":{"videoId":"' + VIDEO_ID + '"}}')


@pytest.fixture
def timed_text():
    return (
        '<?xml version="1.0" encoding="utf-8" ?><transcript>'
        '<text start="0.5" dur="2.1">Tom &amp; Jerry</text>'
        '<text start="2.6" dur="1.4">second line</text>'
        "</transcript>"
    )


@pytest.fixture
def track_urls():
    return {"en": EN_TRACK_URL, "de": DE_TRACK_URL}
