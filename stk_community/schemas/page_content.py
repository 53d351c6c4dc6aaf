import re
from datetime import datetime
from pydantic import BaseModel, Field, AnyHttpUrl, field_validator
from typing import List, Optional

YOUTUBE_URL = re.compile(r"^(https?://)?(www\.)?(youtube\.com/watch\?v=|youtu\.be/)([a-zA-Z0-9_-]{11})$")
YOUTUBE_ID = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([a-zA-Z0-9_-]{11})")


def is_youtube_url(url: str | None) -> bool:
    # empty is fine, the video is optional
    if not url:
        return True
    return bool(YOUTUBE_URL.match(url))

def extract_video_id(url: str | None) -> str:
    if not url:
        return ""
    m = YOUTUBE_ID.search(url)
    return m.group(1) if m else ""


class FAQItem(BaseModel):
    question: str = ""
    answer: str = ""


class PreparationStep(BaseModel):
    title: str = ""
    description: str = ""
    required_items: List[str] = Field(default_factory=lambda: [""])


class AboutUsForm(BaseModel):
    mission: str = Field(min_length=10)
    story: str = Field(min_length=10)
    creator_name: str = Field(min_length=1)
    creator_title: str = Field(min_length=1)
    creator_bio: str = Field(min_length=10)
    creator_image: AnyHttpUrl

    def values(self) -> dict:
        data = self.model_dump()
        data["creator_image"] = str(self.creator_image)
        return data


class InformationForm(BaseModel):
    title: str = ""
    content: str = ""
    video_url: str = ""

    @field_validator("video_url")
    @classmethod
    def _youtube_only(cls, v: str) -> str:
        v = v.strip()
        if not is_youtube_url(v):
            raise ValueError("Please enter a valid YouTube URL")
        return v

    def values(self) -> dict:
        # stored in the generic page_content columns
        return {"mission": self.title, "story": self.content, "video_url": self.video_url or None}


class DocumentsPageForm(BaseModel):
    faqs: List[FAQItem] = Field(min_length=1)
    preparation_steps: List[PreparationStep] = Field(min_length=1)

    def values(self) -> dict:
        return {
            "faqs": [f.model_dump() for f in self.faqs],
            "preparation_steps": [s.model_dump() for s in self.preparation_steps],
        }


class PageContentOut(BaseModel):
    id: str
    page_name: str
    mission: Optional[str] = None
    story: Optional[str] = None
    creator_name: Optional[str] = None
    creator_title: Optional[str] = None
    creator_bio: Optional[str] = None
    creator_image: Optional[str] = None
    video_url: Optional[str] = None
    faqs: Optional[List[FAQItem]] = None
    preparation_steps: Optional[List[PreparationStep]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True
