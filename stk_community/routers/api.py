from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stk_community.database import error_message, get_db
from stk_community.schemas.document import DocumentOut
from stk_community.schemas.institution import InstitutionCard
from stk_community.schemas.page_content import PageContentOut
from stk_community.utils.content import get_page
from stk_community.utils.documents import list_documents, to_out
from stk_community.utils.institutions import get_card, list_cards
from stk_community.utils.listing import filter_institutions
from stk_community.utils.storage import get_bucket

router = APIRouter(prefix="/api", tags=["API"])


def _store_unavailable(e: SQLAlchemyError) -> HTTPException:
    return HTTPException(status_code=503, detail=error_message(e))


@router.get("/institutions", response_model=List[InstitutionCard])
def institutions(q: str = "", b1: bool = False, b2: bool = False, db: Session = Depends(get_db)):
    try:
        cards = list_cards(db)
    except SQLAlchemyError as e:
        raise _store_unavailable(e)
    return filter_institutions(cards, q, b1=b1, b2=b2)


@router.get("/institutions/{institution_id}", response_model=InstitutionCard)
def institution(institution_id: str, db: Session = Depends(get_db)):
    try:
        card = get_card(db, institution_id)
    except SQLAlchemyError as e:
        raise _store_unavailable(e)
    if not card:
        raise HTTPException(status_code=404, detail="University not found")
    return card


@router.get("/pages/{page_name}", response_model=PageContentOut)
def page_content(page_name: str, db: Session = Depends(get_db)):
    try:
        page = get_page(db, page_name)
    except SQLAlchemyError as e:
        raise _store_unavailable(e)
    if not page:
        raise HTTPException(status_code=404, detail="Page content not found")
    return page


@router.get("/documents", response_model=List[DocumentOut])
def documents(db: Session = Depends(get_db), bucket=Depends(get_bucket)):
    try:
        return [to_out(d, bucket) for d in list_documents(db)]
    except SQLAlchemyError as e:
        raise _store_unavailable(e)
