from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Dict, Any

import yaml
from pydantic import ValidationError
from sqlalchemy.orm import Session

from stk_community import config
from stk_community.models.institution import Institution, InstitutionDetail
from stk_community.schemas.article import Article
from stk_community.schemas.institution import DETAIL_FIELDS

logger = logging.getLogger(__name__)

INSTITUTION_FIELDS = ("name", "description", "location", "type", "image_url")


class CatalogError(Exception):
    """Broken or incomplete YAML catalog file."""
    pass


def _load_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise CatalogError(f"Cannot read YAML {path}: {e}") from e


def discover_institutions(root: Path | None = None) -> List[Path]:
    """All *.yaml / *.yml files under <root>/institutions, sorted."""
    root = Path(root) if root else config.CATALOG_ROOT
    folder = root / "institutions"
    if not folder.exists():
        return []
    return sorted(p for p in folder.glob("*.y*ml") if p.is_file())


def import_institution_file(db: Session, path: Path) -> str:
    """
    Imports one institution (upsert by id) and its details.
    Returns the institution id.
    """
    data = _load_yaml(path)
    if not isinstance(data, dict):
        raise CatalogError(f"{path}: top level must be a mapping")

    missing = [k for k in ("id", "name") if not data.get(k)]
    if missing:
        raise CatalogError(f"{path}: missing fields: {', '.join(missing)}")

    details = data.get("details") or {}
    if not isinstance(details, dict):
        raise CatalogError(f"{path}: 'details' must be a mapping")
    unknown = set(details) - set(DETAIL_FIELDS)
    if unknown:
        raise CatalogError(f"{path}: unknown detail fields: {', '.join(sorted(unknown))}")

    inst_id = str(data["id"]).strip()
    values = {k: str(data.get(k) or "") for k in INSTITUTION_FIELDS}
    detail_values = {k: (str(v) if v is not None else None) for k, v in details.items()}

    inst = db.get(Institution, inst_id)
    if inst:
        for k, v in values.items():
            setattr(inst, k, v)
    else:
        inst = Institution(id=inst_id, **values)
        db.add(inst)
    db.flush()

    detail = db.get(InstitutionDetail, inst_id)
    if detail:
        for k, v in detail_values.items():
            setattr(detail, k, v)
    else:
        db.add(InstitutionDetail(university_id=inst_id, **detail_values))

    db.commit()
    return inst_id


def import_all(db: Session, root: Path | None = None, stop_on_error: bool = False) -> Dict[str, Any]:
    """
    Imports every institution file of the catalog.
    Returns { imported: [ids], errors: {path: error}, root: str, count: int }.
    With stop_on_error=True the first failure is raised.
    """
    root = Path(root) if root else config.CATALOG_ROOT
    imported: List[str] = []
    errors: Dict[str, str] = {}

    for p in discover_institutions(root):
        try:
            imported.append(import_institution_file(db, p))
        except Exception as e:
            db.rollback()
            errors[str(p)] = str(e)
            logger.error("Seed import failed for %s: %s", p, e)
            if stop_on_error:
                raise

    return {"imported": imported, "errors": errors, "root": str(root), "count": len(imported)}


def load_articles(root: Path | None = None) -> List[Article]:
    """Article catalog for the information page, newest first. Missing file -> empty list."""
    root = Path(root) if root else config.CATALOG_ROOT
    path = root / "articles.yaml"
    if not path.exists():
        logger.warning("Article catalog not found at %s", path)
        return []

    data = _load_yaml(path) or []
    if not isinstance(data, list):
        raise CatalogError(f"{path}: expected a list of articles")
    try:
        articles = [Article(**item) for item in data]
    except (TypeError, ValidationError) as e:
        raise CatalogError(f"{path}: {e}") from e
    return sorted(articles, key=lambda a: a.created_at, reverse=True)


@lru_cache()
def cached_articles() -> tuple:
    return tuple(load_articles())


if __name__ == "__main__":
    # python -m stk_community.utils.seed_loader
    from stk_community.database import Base, SessionLocal, engine
    from stk_community import models  # noqa: F401  (registers tables)

    logging.basicConfig(level=config.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        result = import_all(db)
        logger.info("Seed import finished: %s", result)
    finally:
        db.close()
