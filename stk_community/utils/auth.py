import logging
import secrets
from datetime import datetime, timedelta

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from stk_community import config
from stk_community.models.admin import Admin

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/token", auto_error=False)

INVALID_CREDENTIALS = "Invalid credentials. Please try again."


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)

def is_password_hash(value: str) -> bool:
    return pwd_context.identify(value) is not None


def _is_demo_pair(username: str, password: str) -> bool:
    if not config.DEMO_ADMIN_USERNAME or not config.DEMO_ADMIN_PASSWORD:
        return False
    same_user = secrets.compare_digest(username.encode(), config.DEMO_ADMIN_USERNAME.encode())
    same_pass = secrets.compare_digest(password.encode(), config.DEMO_ADMIN_PASSWORD.encode())
    return same_user and same_pass


def check_credentials(db: Session, username: str, password: str) -> bool:
    """
    Demo pair first (no database access), then the admins table.
    The stored password must be a bcrypt hash.
    """
    if _is_demo_pair(username, password):
        return True

    admin = db.query(Admin).filter(Admin.username == username).first()
    if not admin:
        return False
    try:
        return verify_password(password, admin.password)
    except ValueError:
        # unrecognised hash format; startup re-hashing has not run for this row
        logger.warning("Admin %s has a non-bcrypt password value", username)
        return False


def create_session_token(username: str) -> str:
    expire = datetime.utcnow() + timedelta(minutes=config.ADMIN_SESSION_MINUTES)
    payload = {"sub": username, "exp": expire, "type": "admin_session"}
    return jwt.encode(payload, config.SECRET_KEY, algorithm=config.JWT_ALGORITHM)

def decode_session_token(token: str) -> str | None:
    """Returns the username, or None for a bad / expired token."""
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != "admin_session":
        return None
    return payload.get("sub")


def session_username(request: Request, bearer: str | None = None) -> str | None:
    token = bearer or request.cookies.get(config.SESSION_COOKIE_NAME)
    if not token:
        return None
    return decode_session_token(token)


def get_current_admin(request: Request, token: str | None = Depends(oauth2_scheme)) -> str:
    username = session_username(request, token)
    if not username:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return username
