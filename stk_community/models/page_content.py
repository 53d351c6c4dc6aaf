from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, JSON
from stk_community.database import Base

ABOUT_PAGE = "uber-uns"
INFORMATION_PAGE = "informationen"
DOCUMENTS_PAGE = "unterlagen"


class PageContent(Base):
    __tablename__ = "page_content"

    id = Column(String, primary_key=True)
    page_name = Column(String, unique=True, index=True, nullable=False)

    mission = Column(Text, nullable=True)
    story = Column(Text, nullable=True)
    creator_name = Column(String, nullable=True)
    creator_title = Column(String, nullable=True)
    creator_bio = Column(Text, nullable=True)
    creator_image = Column(String, nullable=True)
    video_url = Column(String, nullable=True)

    # only used by the documents page
    faqs = Column(JSON, nullable=True)                # [{question, answer}]
    preparation_steps = Column(JSON, nullable=True)   # [{title, description, required_items}]

    created_at = Column(DateTime, default=datetime.utcnow, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=True)
