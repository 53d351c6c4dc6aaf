from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Tuple
from uuid import uuid4

from sqlalchemy.orm import Session

from stk_community.models.page_content import PageContent
from stk_community.schemas.page_content import FAQItem, PreparationStep

logger = logging.getLogger(__name__)

KEEP_ONE_FAQ = "You need to keep at least one FAQ"
KEEP_ONE_STEP = "You need to keep at least one preparation step"
KEEP_ONE_ITEM = "Step must have at least one required item"


class ListGuardError(ValueError):
    """Removing the last remaining element of an editable list."""
    pass


def get_page(db: Session, page_name: str) -> PageContent | None:
    return db.query(PageContent).filter(PageContent.page_name == page_name).first()


def save_page(db: Session, page_name: str, values: Dict[str, Any]) -> Tuple[PageContent, bool]:
    """
    Update-if-exists-else-insert, keyed by page_name. Two separate statements,
    not an atomic upsert; the last writer wins.
    Returns (row, created). Store errors propagate after a rollback.
    """
    try:
        row = get_page(db, page_name)
        created = row is None
        if created:
            row = PageContent(id=str(uuid4()), page_name=page_name, **values)
            db.add(row)
        else:
            for field, value in values.items():
                setattr(row, field, value)
            row.updated_at = datetime.utcnow()
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(row)
    logger.info("%s page content '%s'", "Inserted" if created else "Updated", page_name)
    return row, created


# ------------------------------------------------------------
# Editable lists
# ------------------------------------------------------------
def remove_at(items: List, index: int, message: str) -> List:
    if len(items) <= 1:
        raise ListGuardError(message)
    if not 0 <= index < len(items):
        raise IndexError(f"No element at position {index}")
    return items[:index] + items[index + 1:]


def default_faqs() -> List[FAQItem]:
    return [FAQItem()]

def default_steps() -> List[PreparationStep]:
    return [PreparationStep()]


def load_documents_page(row: PageContent | None) -> Tuple[List[FAQItem], List[PreparationStep]]:
    """Form state for the documents page editor; empty defaults when nothing is stored yet."""
    if row is None:
        return default_faqs(), default_steps()
    faqs = [FAQItem(**f) for f in (row.faqs or []) if isinstance(f, dict)]
    steps = []
    for s in row.preparation_steps or []:
        if not isinstance(s, dict):
            continue
        step = PreparationStep(**s)
        if not step.required_items:
            step.required_items = [""]
        steps.append(step)
    return faqs or default_faqs(), steps or default_steps()


_FAQ_KEY = re.compile(r"^faqs-(\d+)-(question|answer)$")
_STEP_KEY = re.compile(r"^steps-(\d+)-(title|description)$")
_ITEM_KEY = re.compile(r"^steps-(\d+)-items-(\d+)$")


def parse_documents_form(form: Dict[str, str]) -> Tuple[List[FAQItem], List[PreparationStep]]:
    """
    Rebuilds the two lists from flat form keys:
      faqs-<i>-question, faqs-<i>-answer,
      steps-<i>-title, steps-<i>-description, steps-<i>-items-<j>
    Indices keep their order; gaps are closed.
    """
    faqs: Dict[int, Dict[str, str]] = {}
    steps: Dict[int, Dict[str, Any]] = {}

    for key, value in form.items():
        if m := _FAQ_KEY.match(key):
            faqs.setdefault(int(m.group(1)), {})[m.group(2)] = value
        elif m := _STEP_KEY.match(key):
            steps.setdefault(int(m.group(1)), {"items": {}})[m.group(2)] = value
        elif m := _ITEM_KEY.match(key):
            step = steps.setdefault(int(m.group(1)), {"items": {}})
            step["items"][int(m.group(2))] = value

    faq_list = [FAQItem(**faqs[i]) for i in sorted(faqs)]
    step_list = []
    for i in sorted(steps):
        raw = steps[i]
        items = [raw["items"][j] for j in sorted(raw["items"])] or [""]
        step_list.append(PreparationStep(
            title=raw.get("title", ""),
            description=raw.get("description", ""),
            required_items=items,
        ))
    return faq_list or default_faqs(), step_list or default_steps()


def apply_list_action(action: str, faqs: List[FAQItem], steps: List[PreparationStep]
                      ) -> Tuple[List[FAQItem], List[PreparationStep]]:
    """
    Editor buttons:
      add_faq | remove_faq:<i> | add_step | remove_step:<i> |
      add_item:<step> | remove_item:<step>:<i>
    Raises ListGuardError when the action would empty a list, ValueError for unknown actions.
    """
    name, _, args = action.partition(":")
    idx = [int(a) for a in args.split(":") if a != ""] if args else []

    if name == "add_faq":
        return faqs + [FAQItem()], steps
    if name == "remove_faq" and len(idx) == 1:
        return remove_at(faqs, idx[0], KEEP_ONE_FAQ), steps
    if name == "add_step":
        return faqs, steps + [PreparationStep()]
    if name == "remove_step" and len(idx) == 1:
        return faqs, remove_at(steps, idx[0], KEEP_ONE_STEP)
    if name in ("add_item", "remove_item") and idx:
        if not 0 <= idx[0] < len(steps):
            raise IndexError(f"No step at position {idx[0]}")
        step = steps[idx[0]]
        if name == "add_item":
            items = step.required_items + [""]
        elif len(idx) == 2:
            items = remove_at(step.required_items, idx[1], KEEP_ONE_ITEM)
        else:
            raise ValueError(f"Unknown editor action: {action}")
        updated = step.model_copy(update={"required_items": items})
        return faqs, steps[:idx[0]] + [updated] + steps[idx[0] + 1:]

    raise ValueError(f"Unknown editor action: {action}")
