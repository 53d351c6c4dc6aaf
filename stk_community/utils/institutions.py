from __future__ import annotations

import logging
from typing import List, Tuple
from uuid import uuid4

from sqlalchemy.orm import Session, joinedload

from stk_community.models.institution import Institution, InstitutionDetail
from stk_community.schemas.institution import InstitutionCard, InstitutionForm
from stk_community.utils.listing import to_card

logger = logging.getLogger(__name__)


def list_institutions(db: Session) -> List[Institution]:
    """All institutions with their detail row, one query, ordered by name."""
    return (
        db.query(Institution)
        .options(joinedload(Institution.detail))
        .order_by(Institution.name)
        .all()
    )


def list_cards(db: Session) -> List[InstitutionCard]:
    return [to_card(inst, inst.detail) for inst in list_institutions(db)]


def get_card(db: Session, institution_id: str) -> InstitutionCard | None:
    inst = (
        db.query(Institution)
        .options(joinedload(Institution.detail))
        .filter(Institution.id == institution_id)
        .first()
    )
    if not inst:
        return None
    return to_card(inst, inst.detail)


def save_institution(db: Session, form: InstitutionForm, institution_id: str | None = None
                     ) -> Tuple[Institution, bool]:
    """
    Creates the institution when institution_id is None, otherwise updates it.
    The detail row is saved update-if-exists-else-insert.
    Raises LookupError for an unknown institution_id.
    """
    try:
        if institution_id is None:
            inst = Institution(id=str(uuid4()), **form.institution_fields())
            db.add(inst)
            db.flush()
            created = True
        else:
            inst = db.get(Institution, institution_id)
            if not inst:
                raise LookupError(f"University {institution_id} not found")
            for field, value in form.institution_fields().items():
                setattr(inst, field, value)
            created = False

        detail = db.get(InstitutionDetail, inst.id)
        if detail:
            for field, value in form.detail_fields().items():
                setattr(detail, field, value)
        else:
            db.add(InstitutionDetail(university_id=inst.id, **form.detail_fields()))

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(inst)
    logger.info("%s university %s (%s)", "Created" if created else "Updated", inst.id, inst.name)
    return inst, created


def delete_institution(db: Session, institution_id: str) -> bool:
    """Deletes only the institution row; the detail row goes with it via ON DELETE CASCADE."""
    inst = db.get(Institution, institution_id)
    if not inst:
        return False
    try:
        db.delete(inst)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Deleted university %s", institution_id)
    return True
