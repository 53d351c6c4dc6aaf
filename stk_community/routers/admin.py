from __future__ import annotations

import logging
from typing import Dict

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stk_community import config
from stk_community.database import error_message, get_db
from stk_community.models.institution import Institution
from stk_community.models.page_content import ABOUT_PAGE, DOCUMENTS_PAGE, INFORMATION_PAGE
from stk_community.routers.auth import LoginRequired
from stk_community.schemas.institution import DETAIL_FIELDS, InstitutionForm
from stk_community.schemas.page_content import (
    AboutUsForm,
    DocumentsPageForm,
    InformationForm,
    extract_video_id,
)
from stk_community.utils.auth import session_username
from stk_community.utils.content import (
    ListGuardError,
    apply_list_action,
    get_page,
    load_documents_page,
    parse_documents_form,
    save_page,
)
from stk_community.utils.documents import (
    MISSING_FILE_OR_NAME,
    delete_document,
    list_documents,
    to_out,
    upload_document,
)
from stk_community.utils.listing import DEFAULT_LEVEL
from stk_community.utils.institutions import delete_institution, list_institutions, save_institution
from stk_community.utils.storage import StorageError, get_bucket

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(config.TEMPLATES_DIR))

router = APIRouter(prefix="/admin", tags=["Admin"])


def require_admin(request: Request) -> str:
    username = session_username(request)
    if not username:
        raise LoginRequired()
    return username


async def form_data(request: Request) -> Dict[str, str]:
    form = await request.form()
    return {k: v for k, v in form.items() if isinstance(v, str)}


def _ok(message: str) -> dict:
    return {"kind": "success", "title": "Saved", "message": message}

def _fail(message: str, title: str = "Error") -> dict:
    return {"kind": "error", "title": title, "message": message}

def _validation_message(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        field = ".".join(str(x) for x in err.get("loc", ()) if x != "__root__")
        msg = err.get("msg", "invalid value").removeprefix("Value error, ")
        parts.append(f"{field}: {msg}" if field else msg)
    return "; ".join(parts)


def _render(request: Request, name: str, context: dict, status_code: int = 200) -> HTMLResponse:
    context.setdefault("notice", None)
    return templates.TemplateResponse(request, name, context, status_code=status_code)


# ------------------------------------------------------------
# Universities
# ------------------------------------------------------------
def _institution_values(inst: Institution | None) -> dict:
    """Flattens institution + detail into one dict of form fields."""
    if inst is None:
        return {"language_requirements": DEFAULT_LEVEL}
    values = {k: getattr(inst, k) or "" for k in ("name", "description", "location", "type", "image_url")}
    for k in DETAIL_FIELDS:
        values[k] = (getattr(inst.detail, k, None) if inst.detail else None) or ""
    return values


def _universities_page(request: Request, db: Session, notice: dict | None = None,
                       status_code: int = 200) -> HTMLResponse:
    try:
        universities = list_institutions(db)
    except SQLAlchemyError as e:
        logger.error("Error fetching universities: %s", e)
        universities, notice = [], _fail("Failed to load universities")
    return _render(request, "admin/universities.html",
                   {"universities": universities, "notice": notice}, status_code)


def _university_form(request: Request, inst_id: str | None, values: dict,
                     notice: dict | None = None, status_code: int = 200) -> HTMLResponse:
    return _render(request, "admin/university_form.html",
                   {"inst_id": inst_id, "values": values, "notice": notice}, status_code)


@router.get("", response_class=HTMLResponse)
def dashboard(request: Request, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    return _universities_page(request, db)


@router.get("/universities/new", response_class=HTMLResponse)
def new_university(request: Request, admin: str = Depends(require_admin)):
    return _university_form(request, None, _institution_values(None))


@router.get("/universities/{inst_id}", response_class=HTMLResponse)
def edit_university(request: Request, inst_id: str, db: Session = Depends(get_db),
                    admin: str = Depends(require_admin)):
    inst = db.get(Institution, inst_id)
    if not inst:
        return _universities_page(request, db, _fail("University not found"), status.HTTP_404_NOT_FOUND)
    return _university_form(request, inst_id, _institution_values(inst))


def _save_university(request: Request, db: Session, data: Dict[str, str], inst_id: str | None):
    try:
        form = InstitutionForm(**data)
    except ValidationError as e:
        return _university_form(request, inst_id, data, _fail(_validation_message(e)),
                                status.HTTP_422_UNPROCESSABLE_ENTITY)
    try:
        inst, created = save_institution(db, form, inst_id)
    except LookupError as e:
        return _universities_page(request, db, _fail(str(e)), status.HTTP_404_NOT_FOUND)
    except SQLAlchemyError as e:
        logger.error("Error saving university: %s", e)
        return _university_form(request, inst_id, data, _fail(error_message(e)),
                                status.HTTP_400_BAD_REQUEST)

    message = "University added successfully" if created else "University updated successfully"
    return _university_form(request, inst.id, _institution_values(inst), _ok(message))


@router.post("/universities", response_class=HTMLResponse)
def create_university(request: Request, data: Dict[str, str] = Depends(form_data),
                      db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    return _save_university(request, db, data, None)


@router.post("/universities/{inst_id}", response_class=HTMLResponse)
def update_university(request: Request, inst_id: str, data: Dict[str, str] = Depends(form_data),
                      db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    return _save_university(request, db, data, inst_id)


@router.post("/universities/{inst_id}/delete", response_class=HTMLResponse)
def remove_university(request: Request, inst_id: str, db: Session = Depends(get_db),
                      admin: str = Depends(require_admin)):
    try:
        deleted = delete_institution(db, inst_id)
    except SQLAlchemyError as e:
        logger.error("Error deleting university %s: %s", inst_id, e)
        return _universities_page(request, db, _fail(error_message(e)), status.HTTP_400_BAD_REQUEST)
    if not deleted:
        return _universities_page(request, db, _fail("University not found"), status.HTTP_404_NOT_FOUND)
    return _universities_page(request, db, _ok("University deleted successfully"))


# ------------------------------------------------------------
# About us
# ------------------------------------------------------------
ABOUT_FIELDS = ("mission", "story", "creator_name", "creator_title", "creator_bio", "creator_image")


def _about_form(request: Request, values: dict, notice: dict | None = None, status_code: int = 200):
    return _render(request, "admin/about_form.html", {"values": values, "notice": notice}, status_code)


@router.get("/pages/uber-uns", response_class=HTMLResponse)
def edit_about(request: Request, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    notice = None
    try:
        page = get_page(db, ABOUT_PAGE)
    except SQLAlchemyError as e:
        logger.error("Error fetching content: %s", e)
        page, notice = None, _fail("Failed to load page content")
    values = {k: (getattr(page, k) if page else None) or "" for k in ABOUT_FIELDS}
    return _about_form(request, values, notice)


@router.post("/pages/uber-uns", response_class=HTMLResponse)
def save_about(request: Request, data: Dict[str, str] = Depends(form_data),
               db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    values = {k: data.get(k, "") for k in ABOUT_FIELDS}
    try:
        form = AboutUsForm(**values)
    except ValidationError as e:
        return _about_form(request, values, _fail(_validation_message(e)),
                           status.HTTP_422_UNPROCESSABLE_ENTITY)
    try:
        page, _ = save_page(db, ABOUT_PAGE, form.values())
    except SQLAlchemyError as e:
        logger.error("Error saving content: %s", e)
        return _about_form(request, values, _fail(error_message(e), "Failed to save page content"),
                           status.HTTP_400_BAD_REQUEST)
    saved = {k: getattr(page, k) or "" for k in ABOUT_FIELDS}
    return _about_form(request, saved, _ok("About Us page content updated successfully"))


# ------------------------------------------------------------
# Information page
# ------------------------------------------------------------
def _information_form(request: Request, values: dict, notice: dict | None = None, status_code: int = 200):
    return _render(request, "admin/information_form.html", {
        "values": values,
        "video_id": extract_video_id(values.get("video_url")),
        "notice": notice,
    }, status_code)


@router.get("/pages/informationen", response_class=HTMLResponse)
def edit_information(request: Request, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    notice = None
    try:
        page = get_page(db, INFORMATION_PAGE)
    except SQLAlchemyError as e:
        logger.error("Error fetching page content: %s", e)
        page, notice = None, _fail("Failed to load information page content")
    values = {
        "title": (page.mission if page else None) or "",
        "content": (page.story if page else None) or "",
        "video_url": (page.video_url if page else None) or "",
    }
    return _information_form(request, values, notice)


@router.post("/pages/informationen", response_class=HTMLResponse)
def save_information(request: Request, data: Dict[str, str] = Depends(form_data),
                     db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    values = {k: data.get(k, "") for k in ("title", "content", "video_url")}
    try:
        form = InformationForm(**values)
    except ValidationError as e:
        return _information_form(request, values, _fail(_validation_message(e)),
                                 status.HTTP_422_UNPROCESSABLE_ENTITY)
    try:
        page, _ = save_page(db, INFORMATION_PAGE, form.values())
    except SQLAlchemyError as e:
        logger.error("Error updating page content: %s", e)
        return _information_form(request, values, _fail(error_message(e)), status.HTTP_400_BAD_REQUEST)
    saved = {"title": page.mission or "", "content": page.story or "", "video_url": page.video_url or ""}
    return _information_form(request, saved, _ok("Information page content updated successfully"))


# ------------------------------------------------------------
# Documents page: FAQ + preparation steps
# ------------------------------------------------------------
def _steps_form(request: Request, faqs, steps, notice: dict | None = None, status_code: int = 200):
    return _render(request, "admin/documents_page_form.html",
                   {"faqs": faqs, "steps": steps, "notice": notice}, status_code)


@router.get("/pages/unterlagen", response_class=HTMLResponse)
def edit_documents_page(request: Request, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    notice = None
    try:
        page = get_page(db, DOCUMENTS_PAGE)
    except SQLAlchemyError as e:
        logger.error("Error fetching page content: %s", e)
        page, notice = None, _fail("Failed to load document page content")
    faqs, steps = load_documents_page(page)
    return _steps_form(request, faqs, steps, notice)


@router.post("/pages/unterlagen", response_class=HTMLResponse)
def save_documents_page(request: Request, data: Dict[str, str] = Depends(form_data),
                        db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    faqs, steps = parse_documents_form(data)
    action = data.get("action", "save")

    if action != "save":
        try:
            faqs, steps = apply_list_action(action, faqs, steps)
        except (ListGuardError, ValueError, IndexError) as e:
            return _steps_form(request, faqs, steps, _fail(str(e)), status.HTTP_400_BAD_REQUEST)
        return _steps_form(request, faqs, steps)

    form = DocumentsPageForm(faqs=faqs, preparation_steps=steps)
    try:
        page, _ = save_page(db, DOCUMENTS_PAGE, form.values())
    except SQLAlchemyError as e:
        logger.error("Error updating page content: %s", e)
        return _steps_form(request, faqs, steps, _fail(error_message(e)), status.HTTP_400_BAD_REQUEST)
    faqs, steps = load_documents_page(page)
    return _steps_form(request, faqs, steps, _ok("Document page content updated successfully"))


# ------------------------------------------------------------
# Document files
# ------------------------------------------------------------
def _documents_page(request: Request, db: Session, bucket, notice: dict | None = None,
                    status_code: int = 200) -> HTMLResponse:
    try:
        documents = [to_out(d, bucket) for d in list_documents(db)]
    except SQLAlchemyError as e:
        logger.error("Error fetching documents: %s", e)
        documents, notice = [], _fail("Failed to load documents")
    return _render(request, "admin/documents.html", {"documents": documents, "notice": notice}, status_code)


@router.get("/documents", response_class=HTMLResponse)
def documents(request: Request, db: Session = Depends(get_db), bucket=Depends(get_bucket),
              admin: str = Depends(require_admin)):
    return _documents_page(request, db, bucket)


@router.post("/documents", response_class=HTMLResponse)
def upload(
    request: Request,
    name: str = Form(""),
    file: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    bucket=Depends(get_bucket),
    admin: str = Depends(require_admin),
):
    if file is None or not file.filename:
        return _documents_page(request, db, bucket, _fail(MISSING_FILE_OR_NAME), status.HTTP_400_BAD_REQUEST)

    data = file.file.read()
    try:
        doc = upload_document(db, bucket, name, file.filename, data, content_type=file.content_type)
    except ValueError as e:
        return _documents_page(request, db, bucket, _fail(str(e)), status.HTTP_400_BAD_REQUEST)
    except (StorageError, SQLAlchemyError) as e:
        logger.error("Error uploading document: %s", e)
        return _documents_page(request, db, bucket, _fail(error_message(e), "Failed to upload document"),
                               status.HTTP_400_BAD_REQUEST)

    logger.info("Admin %s uploaded %s", admin, doc.file_path)
    return _documents_page(request, db, bucket, _ok("Document uploaded successfully"))


@router.post("/documents/{document_id}/delete", response_class=HTMLResponse)
def remove_document(request: Request, document_id: str, db: Session = Depends(get_db),
                    bucket=Depends(get_bucket), admin: str = Depends(require_admin)):
    try:
        deleted = delete_document(db, bucket, document_id)
    except (StorageError, SQLAlchemyError) as e:
        logger.error("Error deleting document: %s", e)
        return _documents_page(request, db, bucket, _fail(error_message(e), "Failed to delete document"),
                               status.HTTP_400_BAD_REQUEST)
    if not deleted:
        return _documents_page(request, db, bucket, _fail("Document not found"), status.HTTP_404_NOT_FOUND)
    return _documents_page(request, db, bucket, _ok("Document deleted successfully"))
