from __future__ import annotations

from typing import Callable, Iterable, List, Sequence, TypeVar

from stk_community import config
from stk_community.models.institution import Institution, InstitutionDetail
from stk_community.schemas.institution import InstitutionCard

T = TypeVar("T")

NOT_AVAILABLE = "Information not available"
NOT_SPECIFIED = "Not specified"
DEFAULT_LEVEL = "B2"
LANGUAGE_LEVELS = ("B1", "B2")


def _norm(s: str | None) -> str:
    return (s or "").strip().lower()


def _semester_part(value: str | None, index: int) -> str:
    # "1 Mai bis 30 Juni, November bis 15 Dezember" -> WS / SS
    if not value:
        return NOT_SPECIFIED
    parts = value.split(",")
    if index >= len(parts):
        return NOT_SPECIFIED
    return parts[index].strip() or NOT_SPECIFIED


def _or(value: str | None, fallback: str) -> str:
    return value if value and value.strip() else fallback


def to_card(inst: Institution, detail: InstitutionDetail | None) -> InstitutionCard:
    """
    Flattens an institution and its (possibly missing) detail row into the display shape.
    Every nullable field gets an explicit fallback string.
    """
    d = detail
    return InstitutionCard(
        id=inst.id,
        name=inst.name,
        description=_or(inst.description, NOT_AVAILABLE),
        location=_or(inst.location, NOT_AVAILABLE),
        type=_or(inst.type, NOT_AVAILABLE),
        registration=_or(d.application_method if d else None, NOT_AVAILABLE),
        level=_or(d.language_requirements if d else None, DEFAULT_LEVEL).strip(),
        bewerbung_ws=_semester_part(d.application_deadline if d else None, 0),
        bewerbung_ss=_semester_part(d.application_deadline if d else None, 1),
        aufnahme_ws=_semester_part(d.application_test_date if d else None, 0),
        aufnahme_ss=_semester_part(d.application_test_date if d else None, 1),
        adresse=_or(d.address if d else None, "Address not available"),
        email=_or(d.email if d else None, "Email not available"),
        bundesland=_or(d.bundesland if d else None, NOT_AVAILABLE),
        kurse=_or(d.kurse if d else None, NOT_AVAILABLE),
        status=_or(d.status if d else None, NOT_AVAILABLE),
        photo_url=_or(inst.image_url, config.DEFAULT_PHOTO_URL),
        more_info=_or(d.website_url if d else None, "#"),
    )


# ------------------------------------------------------------
# Filters (all recomputed per request, result sets are small)
# ------------------------------------------------------------
def search(items: Iterable[T], term: str | None, key: Callable[[T], str]) -> List[T]:
    """Case-insensitive substring match on key(item). Empty term keeps everything."""
    needle = _norm(term)
    items = list(items)
    if not needle:
        return items
    return [it for it in items if needle in (key(it) or "").lower()]


def toggle_filter(items: Iterable[T], selected: Iterable[str], key: Callable[[T], str]) -> List[T]:
    """
    Checkbox semantics: nothing selected -> everything,
    otherwise items whose key is any of the selected values.
    """
    wanted = {_norm(s) for s in selected if s and s.strip()}
    items = list(items)
    if not wanted:
        return items
    return [it for it in items if _norm(key(it)) in wanted]


def filter_institutions(cards: Sequence[InstitutionCard], term: str | None = None,
                        b1: bool = False, b2: bool = False) -> List[InstitutionCard]:
    levels = [lvl for lvl, on in zip(LANGUAGE_LEVELS, (b1, b2)) if on]
    result = search(cards, term, key=lambda c: c.name)
    if not levels:
        return result
    # exact "B1" / "B2", unlike the case-insensitive toggle_filter
    return [c for c in result if c.level in levels]


def filter_articles(articles: Sequence, term: str | None = None, category: str | None = None) -> list:
    result = search(articles, term, key=lambda a: a.title)
    if category and _norm(category) != "all":
        result = toggle_filter(result, [category], key=lambda a: a.category)
    return result


# ------------------------------------------------------------
# Documents
# ------------------------------------------------------------
def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} bytes"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def file_kind(mime_type: str | None) -> str:
    t = _norm(mime_type)
    if "pdf" in t:
        return "pdf"
    # before "doc": OOXML spreadsheets are "...officedocument.spreadsheetml..."
    if "sheet" in t or "excel" in t or "xls" in t:
        return "xls"
    if "word" in t or "doc" in t:
        return "doc"
    return "file"
