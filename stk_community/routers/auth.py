import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.security import OAuth2PasswordRequestForm
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stk_community import config
from stk_community.database import get_db
from stk_community.schemas.admin import AdminProfile, Token
from stk_community.utils.auth import (
    INVALID_CREDENTIALS,
    check_credentials,
    create_session_token,
    get_current_admin,
)

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(config.TEMPLATES_DIR))

router = APIRouter(tags=["auth"])


class LoginRequired(Exception):
    """Raised by admin HTML routes without a valid session; rendered as the login form."""
    pass


def render_login(request: Request, error: str | None = None, status_code: int = 200) -> HTMLResponse:
    notice = {"kind": "error", "title": "Login failed", "message": error} if error else None
    return templates.TemplateResponse(
        request, "admin/login.html", {"notice": notice}, status_code=status_code
    )


def _verify(db: Session, username: str, password: str) -> bool:
    try:
        return check_credentials(db, username.strip(), password)
    except SQLAlchemyError as e:
        logger.error("Credential lookup failed: %s", e)
        raise HTTPException(status_code=503, detail="Login is temporarily unavailable") from e


@router.post("/token", response_model=Token)
def login_for_token(form: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    """Bearer token for the JSON API."""
    if not _verify(db, form.username, form.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)
    return Token(access_token=create_session_token(form.username.strip()))


@router.get("/me", response_model=AdminProfile)
def get_profile(username: str = Depends(get_current_admin)):
    return AdminProfile(username=username)


@router.post("/admin/login", response_class=HTMLResponse)
def admin_login(
    request: Request,
    username: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    if not _verify(db, username, password):
        logger.info("Rejected admin login for %r", username)
        return render_login(request, INVALID_CREDENTIALS, status_code=status.HTTP_401_UNAUTHORIZED)

    logger.info("Admin %r logged in", username)
    response = RedirectResponse(url="/admin", status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        config.SESSION_COOKIE_NAME,
        create_session_token(username.strip()),
        max_age=config.ADMIN_SESSION_MINUTES * 60,
        httponly=True,
        samesite="lax",
    )
    return response


@router.post("/admin/logout")
def admin_logout():
    response = RedirectResponse(url="/admin", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(config.SESSION_COOKIE_NAME)
    return response
