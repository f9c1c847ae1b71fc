from enum import Enum
from typing import List, Optional


class InvalidYouTubeUrlError(ValueError):
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Could not resolve a YouTube video ID from {url!r}")


class ContentApiError(RuntimeError):
    """Raised when the content listing API cannot be read."""


class TranscriptErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    VIDEO_UNAVAILABLE = "video_unavailable"
    DISABLED = "disabled"
    NOT_AVAILABLE = "not_available"
    LANGUAGE_UNAVAILABLE = "language_unavailable"


class TranscriptError(Exception):
    """A transcript could not be fetched.

    Every failure carries a ``kind`` so callers can dispatch on it
    exhaustively instead of chaining ``except`` clauses. The subclasses
    below only pin the kind and the message.
    """

    kind: TranscriptErrorKind

    def __init__(
        self,
        message: str,
        video_id: str = "",
        lang: Optional[str] = None,
        available_langs: Optional[List[str]] = None,
    ):
        self.video_id = video_id
        self.lang = lang
        self.available_langs = available_langs or []
        super().__init__(message)


class TooManyRequestsError(TranscriptError):
    kind = TranscriptErrorKind.RATE_LIMITED

    def __init__(self, video_id: str = ""):
        super().__init__(
            "YouTube is receiving too many requests from this IP and now requires solving a captcha to continue",
            video_id=video_id,
        )


class VideoUnavailableError(TranscriptError):
    kind = TranscriptErrorKind.VIDEO_UNAVAILABLE

    def __init__(self, video_id: str):
        super().__init__(f"The video is no longer available ({video_id})", video_id=video_id)


class TranscriptDisabledError(TranscriptError):
    kind = TranscriptErrorKind.DISABLED

    def __init__(self, video_id: str):
        super().__init__(f"Transcript is disabled on this video ({video_id})", video_id=video_id)


class TranscriptNotAvailableError(TranscriptError):
    kind = TranscriptErrorKind.NOT_AVAILABLE

    def __init__(self, video_id: str):
        super().__init__(f"No transcripts are available for this video ({video_id})", video_id=video_id)


class TranscriptLanguageUnavailableError(TranscriptError):
    kind = TranscriptErrorKind.LANGUAGE_UNAVAILABLE

    def __init__(self, lang: str, available_langs: List[str], video_id: str):
        super().__init__(
            f"No transcripts are available in {lang} for this video ({video_id}). "
            f"Available languages: {', '.join(available_langs)}",
            video_id=video_id,
            lang=lang,
            available_langs=available_langs,
        )
