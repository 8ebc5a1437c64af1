import datetime as dt
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

Sentiment = Literal["positive", "negative", "neutral", "mixed"]


class ImageRef(BaseModel):
    src: str = Field(..., description="Absolute image URL")
    alt: Optional[str] = Field(None, description="Alt text when the page provides one")


class ExtractedContent(BaseModel):
    title: str = Field("", description="Raw title as extracted (cleaned later)")
    description: str = Field("", description="Meta description or synthesized excerpt")
    content: str = Field("", description="Readable body text")
    images: List[ImageRef] = Field(default_factory=list, description="Ordered images, hero first")
    site_name: Optional[str] = Field(None, description="Publisher or platform name")
    author: Optional[str] = Field(None, description="Byline or handle")
    is_fallback: bool = Field(False, description="True for synthesized terminal records")


class RelatedResult(BaseModel):
    title: str = ""
    url: str = ""
    content: str = Field("", description="Excerpt returned by the search service")
    score: float = 0.0


class Analysis(BaseModel):
    summary: str
    tldr: Optional[str] = None
    key_points: List[str] = Field(..., min_length=1, max_length=3)
    detailed_points: List[str] = Field(default_factory=list, max_length=10)
    topics: List[str] = Field(..., min_length=1, max_length=5)
    sentiment: Sentiment = "neutral"
    reading_time_minutes: int = Field(..., ge=1)
    content_type: str = "article"
    comments_summary: Optional[str] = None
    broader_context: Optional[str] = None
    related_sources: List[Any] = Field(default_factory=list)


class ExtractRequest(BaseModel):
    article_id: UUID = Field(..., description="Row id of the article to process")
    url: str = Field(..., description="The user-submitted link")
    pre_extracted: bool = Field(False, description="Content was captured by an authenticated client")
    content: Optional[str] = None
    title: Optional[str] = None
    image_url: Optional[str] = None
    author: Optional[str] = None


class DigestRequest(BaseModel):
    user_id: Optional[UUID] = None
    date: Optional[dt.date] = None
    test_all: bool = False


class DigestArticle(BaseModel):
    article_id: Optional[str] = None
    title: str = ""
    image_url: Optional[str] = None
    summary: str = ""
    highlights: List[str] = Field(default_factory=list, max_length=2)
    url: Optional[str] = None


class DigestContent(BaseModel):
    overall_summary: str
    top_themes: List[str] = Field(default_factory=list, max_length=3)
    articles: List[DigestArticle] = Field(default_factory=list)
    ai_insights: Optional[str] = None


class DigestOutcome(BaseModel):
    user_id: str
    success: bool
    digest_id: Optional[str] = None
    skipped: Optional[str] = None
    error: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
