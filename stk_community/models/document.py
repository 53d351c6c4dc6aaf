from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime
from stk_community.database import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    file_path = Column(String, nullable=False)   # object key inside the bucket
    size = Column(Integer, nullable=False)       # bytes
    type = Column(String, nullable=False)        # MIME type
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
