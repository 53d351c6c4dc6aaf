from datetime import date
from pydantic import BaseModel
from typing import Literal


class Article(BaseModel):
    id: int
    title: str
    content: str
    image_url: str = ""
    created_at: date
    category: Literal["exams", "visa", "living", "language"]

    @property
    def excerpt(self) -> str:
        first = self.content.split("\n\n", 1)[0]
        return first if len(first) <= 220 else first[:217].rstrip() + "..."
