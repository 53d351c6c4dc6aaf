from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from stk_community import config

DATABASE_URL = config.DATABASE_URL
Base = declarative_base()

# Fall back to a local SQLite file when DATABASE_URL is not set
if not DATABASE_URL or not DATABASE_URL.strip():
    db_path = Path(__file__).with_name("app.db")
    DATABASE_URL = f"sqlite:///{db_path}"

if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False})

    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    @event.listens_for(engine, "connect")
    def _enable_sqlite_fk(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
else:
    engine = create_engine(DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def error_message(exc: Exception) -> str:
    """The driver's own message for a SQLAlchemy error, shown to the admin verbatim."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)
