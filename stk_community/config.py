import os
from pathlib import Path
from dotenv import load_dotenv

# .env lives next to the package, not the current working directory
load_dotenv(Path(__file__).with_name(".env"))

PACKAGE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"

DATABASE_URL = os.getenv("DATABASE_URL")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Session tokens
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ADMIN_SESSION_MINUTES = int(os.getenv("ADMIN_SESSION_MINUTES", "480"))
SESSION_COOKIE_NAME = "admin_session"

# Optional demo account, checked before the admins table. Disabled when unset.
DEMO_ADMIN_USERNAME = os.getenv("DEMO_ADMIN_USERNAME") or None
DEMO_ADMIN_PASSWORD = os.getenv("DEMO_ADMIN_PASSWORD") or None

# Object storage
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "local").lower()  # local | s3
STORAGE_BUCKET = os.getenv("STORAGE_BUCKET", "documents")
STORAGE_DIR = Path(os.getenv("STORAGE_DIR") or PACKAGE_DIR / "storage")
STORAGE_PUBLIC_URL = os.getenv("STORAGE_PUBLIC_URL", "/storage").rstrip("/")
S3_ENDPOINT_URL = os.getenv("S3_ENDPOINT_URL") or None
S3_REGION = os.getenv("S3_REGION", "eu-central-1")
AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID") or None
AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY") or None

# YAML catalogs (institutions seed + articles)
CATALOG_ROOT = Path(os.getenv("CATALOG_ROOT") or PACKAGE_DIR / "catalog")

DEFAULT_PHOTO_URL = "https://images.unsplash.com/photo-1592853598064-0029ebd8de92"
