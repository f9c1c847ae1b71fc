from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Union


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Content listing API ---

class ContentEntry(CamelModel):
    title: str = ""
    url: str = ""
    created_time: str = ""

    @field_validator("title", "url", "created_time", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        return "" if value is None else value


class ContentListResponse(CamelModel):
    entries: List[ContentEntry] = []
    next_cursor: str = ""
    has_more: bool = False

    @field_validator("entries", "next_cursor", "has_more", mode="before")
    @classmethod
    def null_as_default(cls, value, info):
        if value is not None:
            return value
        return {"entries": [], "next_cursor": "", "has_more": False}[info.field_name]


# --- Classification ---

class ClassifiedLinks(BaseModel):
    web: List[str] = []
    youtube: List[str] = []


# --- Extracted records ---

class WebMetaData(CamelModel):
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    keywords: Optional[str] = None


class YouTubeMetaData(WebMetaData):
    view_count: Optional[str] = None
    like_count: Optional[str] = None
    duration: Optional[str] = None


class TranscriptSegment(CamelModel):
    text: str
    duration: float
    offset: float = Field(..., description="Start time in seconds")
    lang: Optional[str] = None


class ExtractedRecord(CamelModel):
    title: str
    url: str = Field(..., description="Always the requested URL, never the redirect target")
    consumed_at: Optional[str] = None

    # Set only on fallback records; never serialized
    error: Optional[str] = Field(default=None, exclude=True)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_json(self) -> dict:
        data = self.model_dump(mode="json", by_alias=True)
        for key in ("consumedAt", "transcript"):
            if data.get(key) is None:
                data.pop(key, None)
        data["metaData"] = {k: v for k, v in data["metaData"].items() if v is not None}
        return data


class ExtractedWebContent(ExtractedRecord):
    published_date: Optional[str] = None
    full_content: str = ""
    meta_data: WebMetaData = Field(default_factory=WebMetaData)


class ExtractedYouTubeContent(ExtractedRecord):
    video_id: str = ""
    channel_name: str = ""
    publish_date: Optional[str] = None
    description: str = ""
    meta_data: YouTubeMetaData = Field(default_factory=YouTubeMetaData)
    transcript: Optional[List[TranscriptSegment]] = None


EnrichedRecord = Union[ExtractedWebContent, ExtractedYouTubeContent]


class SyncResult(BaseModel):
    added: int = 0
    updated: int = 0
    scraped: int = 0
    errors: int = 0
