from __future__ import annotations

import logging
import mimetypes
from typing import List
from uuid import uuid4

from sqlalchemy.orm import Session

from stk_community.models.document import Document
from stk_community.schemas.document import DocumentOut
from stk_community.utils.listing import file_kind, format_file_size
from stk_community.utils.storage import build_storage_path

logger = logging.getLogger(__name__)

MISSING_FILE_OR_NAME = "Please select a file and provide a name"


def default_display_name(filename: str) -> str:
    """Everything before the first dot: "My Doc.pdf" -> "My Doc"."""
    return filename.split(".")[0].strip()


def list_documents(db: Session) -> List[Document]:
    return db.query(Document).order_by(Document.created_at.desc()).all()


def to_out(doc: Document, bucket) -> DocumentOut:
    return DocumentOut(
        id=doc.id,
        name=doc.name,
        file_path=doc.file_path,
        size=doc.size,
        type=doc.type,
        created_at=doc.created_at,
        url=bucket.get_public_url(doc.file_path),
        size_label=format_file_size(doc.size),
        kind=file_kind(doc.type),
    )


def upload_document(db: Session, bucket, name: str | None, filename: str, data: bytes,
                    content_type: str | None = None, now_ms: int | None = None) -> Document:
    """
    Writes the bytes to the bucket, then inserts the metadata row.
    If the insert fails the stored object stays behind; nothing cleans it up.
    """
    display_name = (name or "").strip() or default_display_name(filename or "")
    if not filename or not display_name:
        raise ValueError(MISSING_FILE_OR_NAME)

    mime = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
    path = build_storage_path(display_name, filename, now_ms=now_ms)

    bucket.upload(path, data, content_type=mime)

    doc = Document(id=str(uuid4()), name=display_name, file_path=path, size=len(data), type=mime)
    try:
        db.add(doc)
        db.commit()
    except Exception:
        db.rollback()
        logger.warning("Metadata insert failed, object %s is orphaned in bucket %s", path, bucket.bucket)
        raise

    db.refresh(doc)
    return doc


def delete_document(db: Session, bucket, document_id: str) -> bool:
    """Storage object first, then the row. Not transactional."""
    doc = db.get(Document, document_id)
    if not doc:
        return False

    bucket.remove([doc.file_path])
    try:
        db.delete(doc)
        db.commit()
    except Exception:
        db.rollback()
        logger.warning("Object %s removed but row %s could not be deleted", doc.file_path, document_id)
        raise
    logger.info("Deleted document %s (%s)", document_id, doc.file_path)
    return True
