import logging
import sys

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from stk_community import config
from stk_community import models  # noqa: F401  registers tables on Base.metadata
from stk_community.database import Base, engine
from stk_community.models.admin import Admin
from stk_community.routers import admin as admin_router, api as api_router, auth as auth_router, pages as pages_router
from stk_community.routers.auth import LoginRequired, render_login
from stk_community.utils.auth import get_password_hash, is_password_hash


def setup_logging(level: str = config.LOG_LEVEL) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"))
    root = logging.getLogger("stk_community")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level, logging.INFO))


setup_logging()
logger = logging.getLogger(__name__)


def rehash_plaintext_passwords() -> int:
    """Admins created by hand with a raw password get it bcrypt-hashed on startup."""
    updated = 0
    with Session(engine) as db:
        for admin in db.query(Admin).all():
            if not is_password_hash(admin.password):
                logger.info("Hashing plaintext password of admin %s", admin.username)
                admin.password = get_password_hash(admin.password)
                updated += 1
        if updated:
            db.commit()
    return updated


app = FastAPI(title="STK Community")
Base.metadata.create_all(bind=engine)

try:
    if count := rehash_plaintext_passwords():
        logger.info("Re-hashed %d admin passwords", count)
except SQLAlchemyError as e:
    logger.error("Could not check admin passwords: %s", e)

app.include_router(auth_router.router)
app.include_router(pages_router.router)
app.include_router(api_router.router)
app.include_router(admin_router.router)

if config.STORAGE_BACKEND == "local":
    config.STORAGE_DIR.mkdir(parents=True, exist_ok=True)
    app.mount(config.STORAGE_PUBLIC_URL, StaticFiles(directory=str(config.STORAGE_DIR)), name="storage")

templates = Jinja2Templates(directory=str(config.TEMPLATES_DIR))


def _wants_json(request: Request) -> bool:
    path = request.url.path
    return path.startswith("/api") or path in ("/token", "/me")


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return render_login(request, status_code=200 if request.method == "GET" else 401)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if _wants_json(request) or exc.status_code != 404:
        return JSONResponse({"detail": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))
    logger.warning("404 Error: User attempted to access non-existent route: %s", request.url.path)
    return templates.TemplateResponse(
        request, "not_found.html", {"path": request.url.path, "notice": None}, status_code=404
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=True)
    if _wants_json(request):
        return JSONResponse({"detail": "Internal server error"}, status_code=500)
    return templates.TemplateResponse(request, "error.html", {"notice": None}, status_code=500)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("stk_community.main:app", host="127.0.0.1", port=8000, reload=True)
