from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stk_community import config
from stk_community.database import error_message, get_db
from stk_community.models.page_content import ABOUT_PAGE, DOCUMENTS_PAGE, INFORMATION_PAGE
from stk_community.schemas.page_content import extract_video_id
from stk_community.utils.content import get_page, load_documents_page
from stk_community.utils.documents import list_documents, to_out
from stk_community.utils.institutions import get_card, list_cards
from stk_community.utils.listing import filter_articles, filter_institutions, search, toggle_filter
from stk_community.utils.seed_loader import CatalogError, cached_articles
from stk_community.utils.storage import get_bucket

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(config.TEMPLATES_DIR))

router = APIRouter(tags=["Pages"])

ARTICLE_CATEGORIES = ["all", "exams", "visa", "living", "language"]
DOCUMENT_KINDS = ["pdf", "doc", "xls", "file"]


def _error(title: str, message: str = "Please try again later") -> dict:
    return {"kind": "error", "title": title, "message": message}


@router.get("/", response_class=HTMLResponse)
def index(
    request: Request,
    q: str = "",
    b1: bool = False,
    b2: bool = False,
    db: Session = Depends(get_db),
):
    notice = None
    try:
        cards = list_cards(db)
    except SQLAlchemyError as e:
        logger.error("Error fetching universities: %s", e)
        cards, notice = [], _error("Error fetching universities", error_message(e))

    return templates.TemplateResponse(request, "index.html", {
        "universities": filter_institutions(cards, q, b1=b1, b2=b2),
        "q": q,
        "b1": b1,
        "b2": b2,
        "notice": notice,
    })


@router.get("/uni/{institution_id}", response_class=HTMLResponse)
def uni_details(request: Request, institution_id: str, db: Session = Depends(get_db)):
    try:
        card = get_card(db, institution_id)
    except SQLAlchemyError as e:
        logger.error("Error fetching university %s: %s", institution_id, e)
        return templates.TemplateResponse(
            request, "uni_details.html",
            {"university": None, "notice": _error("Error fetching university")},
            status_code=503,
        )

    return templates.TemplateResponse(
        request, "uni_details.html", {"university": card, "notice": None},
        status_code=200 if card else 404,
    )


@router.get("/uber-uns", response_class=HTMLResponse)
def uber_uns(request: Request, db: Session = Depends(get_db)):
    notice = None
    try:
        page = get_page(db, ABOUT_PAGE)
    except SQLAlchemyError as e:
        logger.error("Error fetching about page: %s", e)
        page, notice = None, _error("Failed to load page content")
    return templates.TemplateResponse(request, "uber_uns.html", {"page": page, "notice": notice})


@router.get("/informationen", response_class=HTMLResponse)
def informationen(
    request: Request,
    q: str = "",
    category: str = "all",
    db: Session = Depends(get_db),
):
    notice = None
    try:
        page = get_page(db, INFORMATION_PAGE)
    except SQLAlchemyError as e:
        logger.error("Error fetching information page: %s", e)
        page, notice = None, _error("Failed to load information page content")

    try:
        articles = list(cached_articles())
    except CatalogError as e:
        logger.error("Article catalog is broken: %s", e)
        articles, notice = [], _error("Failed to load articles")

    if category not in ARTICLE_CATEGORIES:
        category = "all"

    return templates.TemplateResponse(request, "informationen.html", {
        "page": page,
        "video_id": extract_video_id(page.video_url if page else None),
        "articles": filter_articles(articles, q, category),
        "categories": ARTICLE_CATEGORIES,
        "category": category,
        "q": q,
        "notice": notice,
    })


@router.get("/unterlagen", response_class=HTMLResponse)
def unterlagen(
    request: Request,
    q: str = "",
    kind: List[str] = Query(default=[]),
    db: Session = Depends(get_db),
    bucket=Depends(get_bucket),
):
    notice = None
    try:
        docs = [to_out(d, bucket) for d in list_documents(db)]
        page = get_page(db, DOCUMENTS_PAGE)
    except SQLAlchemyError as e:
        logger.error("Error fetching documents: %s", e)
        docs, page, notice = [], None, _error("Failed to load documents")

    docs = search(docs, q, key=lambda d: d.name)
    docs = toggle_filter(docs, kind, key=lambda d: d.kind)

    faqs, steps = ([], [])
    if page is not None:
        faqs, steps = load_documents_page(page)

    return templates.TemplateResponse(request, "unterlagen.html", {
        "documents": docs,
        "kinds": DOCUMENT_KINDS,
        "selected_kinds": kind,
        "q": q,
        "faqs": [f for f in faqs if f.question.strip()],
        "steps": [s for s in steps if s.title.strip()],
        "notice": notice,
    })
