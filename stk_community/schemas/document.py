from datetime import datetime
from pydantic import BaseModel


class DocumentOut(BaseModel):
    id: str
    name: str
    file_path: str
    size: int
    type: str
    created_at: datetime
    url: str
    size_label: str
    kind: str
