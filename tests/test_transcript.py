import httpx
import pytest
import respx

from content_sync.errors import (
    InvalidYouTubeUrlError,
    TooManyRequestsError,
    TranscriptDisabledError,
    TranscriptError,
    TranscriptErrorKind,
    TranscriptLanguageUnavailableError,
    TranscriptNotAvailableError,
    VideoUnavailableError,
)
from content_sync.extract.transcript import fetch_transcript, parse_caption_tracks, parse_timed_text


class TestParseCaptionTracks:
    def test_reads_tracks_in_page_order(self, captions_page, video_id):
        tracks = parse_caption_tracks(captions_page, video_id)
        assert [t["languageCode"] for t in tracks] == ["en", "de"]

    def test_captcha_page_is_rate_limited(self, video_id):
        page = '<html><div class="g-recaptcha"></div>"playabilityStatus":{}</html>'
        with pytest.raises(TooManyRequestsError) as exc_info:
            parse_caption_tracks(page, video_id)
        assert exc_info.value.kind is TranscriptErrorKind.RATE_LIMITED

    def test_missing_playability_means_unavailable(self, video_id):
        with pytest.raises(VideoUnavailableError) as exc_info:
            parse_caption_tracks("<html>gone</html>", video_id)
        assert exc_info.value.video_id == video_id

    def test_no_captions_means_disabled(self, no_captions_page, video_id):
        with pytest.raises(TranscriptDisabledError):
            parse_caption_tracks(no_captions_page, video_id)

    def test_unparseable_captions_means_disabled(self, video_id):
        page = '"playabilityStatus":{},"captions":{not json,"videoDetails":{}'
        with pytest.raises(TranscriptDisabledError):
            parse_caption_tracks(page, video_id)

    def test_empty_track_list_means_not_available(self, video_id):
        page = '"captions":{"playerCaptionsTracklistRenderer":{"captionTracks":[]}},"videoDetails":{}'
        with pytest.raises(TranscriptNotAvailableError):
            parse_caption_tracks(page, video_id)

    def test_unexpected_renderer_shape_means_disabled(self, video_id):
        page = '"captions":{"playerCaptionsTracklistRenderer":"oops"},"videoDetails":{}'
        with pytest.raises(TranscriptDisabledError):
            parse_caption_tracks(page, video_id)

    def test_non_list_tracks_mean_not_available(self, video_id):
        page = '"captions":{"playerCaptionsTracklistRenderer":{"captionTracks":{"a":1}}},"videoDetails":{}'
        with pytest.raises(TranscriptNotAvailableError):
            parse_caption_tracks(page, video_id)

    def test_falls_back_when_video_details_marker_moves(self, video_id):
        page = (
            '"captions":{"playerCaptionsTracklistRenderer":{"captionTracks":'
            '[{"baseUrl":"https://x","languageCode":"fr"}]}},"microformat":{"a":1}}'
        )
        tracks = parse_caption_tracks(page, video_id)
        assert tracks[0]["languageCode"] == "fr"

    def test_errors_share_one_dispatchable_base(self, video_id):
        kinds = set()
        for page in ["<html></html>", '"playabilityStatus":{}', 'class="g-recaptcha"']:
            try:
                parse_caption_tracks(page, video_id)
            except TranscriptError as e:
                kinds.add(e.kind)
        assert kinds == {
            TranscriptErrorKind.VIDEO_UNAVAILABLE,
            TranscriptErrorKind.DISABLED,
            TranscriptErrorKind.RATE_LIMITED,
        }


def test_parse_timed_text_keeps_document_order(timed_text):
    segments = parse_timed_text(timed_text, "en")

    assert [s.text for s in segments] == ["Tom & Jerry", "second line"]
    assert segments[0].offset == 0.5
    assert segments[0].duration == 2.1
    assert segments[1].offset == 2.6
    assert all(s.lang == "en" for s in segments)


def test_parse_timed_text_skips_entries_with_bad_timing():
    xml = (
        '<transcript><text start="0.0" dur="">no duration</text>'
        '<text start="1.0" dur="2.0">kept</text></transcript>'
    )
    segments = parse_timed_text(xml)

    assert [s.text for s in segments] == ["kept"]
    assert segments[0].offset == 1.0


class TestFetchTranscript:
    @pytest.mark.asyncio
    @respx.mock
    async def test_defaults_to_first_track(self, watch_url, captions_page, track_urls, timed_text):
        respx.get(watch_url).mock(return_value=httpx.Response(200, text=captions_page))
        respx.get(track_urls["en"]).mock(return_value=httpx.Response(200, text=timed_text))

        segments = await fetch_transcript("abc12345678")

        assert len(segments) == 2
        assert segments[0].lang == "en"

    @pytest.mark.asyncio
    @respx.mock
    async def test_accepts_any_url_shape(self, watch_url, captions_page, track_urls, timed_text):
        respx.get(watch_url).mock(return_value=httpx.Response(200, text=captions_page))
        respx.get(track_urls["en"]).mock(return_value=httpx.Response(200, text=timed_text))

        segments = await fetch_transcript("https://youtu.be/abc12345678")

        assert segments[1].text == "second line"

    @pytest.mark.asyncio
    @respx.mock
    async def test_requested_language(self, watch_url, captions_page, track_urls, timed_text):
        page_route = respx.get(watch_url).mock(return_value=httpx.Response(200, text=captions_page))
        respx.get(track_urls["de"]).mock(return_value=httpx.Response(200, text=timed_text))

        segments = await fetch_transcript("abc12345678", lang="de")

        assert all(s.lang == "de" for s in segments)
        assert page_route.calls.last.request.headers["Accept-Language"] == "de"

    @pytest.mark.asyncio
    @respx.mock
    async def test_unknown_language_lists_available(self, watch_url, captions_page):
        respx.get(watch_url).mock(return_value=httpx.Response(200, text=captions_page))

        with pytest.raises(TranscriptLanguageUnavailableError) as exc_info:
            await fetch_transcript("abc12345678", lang="fr")

        assert exc_info.value.lang == "fr"
        assert exc_info.value.available_langs == ["en", "de"]
        assert exc_info.value.kind is TranscriptErrorKind.LANGUAGE_UNAVAILABLE

    @pytest.mark.asyncio
    @respx.mock
    async def test_disabled_captions(self, watch_url, no_captions_page):
        respx.get(watch_url).mock(return_value=httpx.Response(200, text=no_captions_page))

        with pytest.raises(TranscriptDisabledError):
            await fetch_transcript(watch_url)

    @pytest.mark.asyncio
    @respx.mock
    async def test_captcha_page(self, watch_url):
        respx.get(watch_url).mock(
            return_value=httpx.Response(429, text='<form><div class="g-recaptcha"></div></form>')
        )

        with pytest.raises(TooManyRequestsError):
            await fetch_transcript(watch_url)

    @pytest.mark.asyncio
    @respx.mock
    async def test_caption_document_error_status(self, watch_url, captions_page, track_urls):
        respx.get(watch_url).mock(return_value=httpx.Response(200, text=captions_page))
        respx.get(track_urls["en"]).mock(return_value=httpx.Response(500))

        with pytest.raises(TranscriptNotAvailableError):
            await fetch_transcript(watch_url)

    @pytest.mark.asyncio
    async def test_unresolvable_input(self):
        with pytest.raises(InvalidYouTubeUrlError):
            await fetch_transcript("https://example.com")

    @pytest.mark.asyncio
    @respx.mock
    async def test_bare_id_of_any_length_is_used_as_is(self, captions_page, track_urls, timed_text):
        page_route = respx.get("https://www.youtube.com/watch?v=shortid").mock(
            return_value=httpx.Response(200, text=captions_page)
        )
        respx.get(track_urls["en"]).mock(return_value=httpx.Response(200, text=timed_text))

        segments = await fetch_transcript("shortid")

        assert page_route.called
        assert len(segments) == 2
