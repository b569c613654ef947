import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from forum.core.config import settings

# -----------------------
# Logging setup
# -----------------------
logger = logging.getLogger(__name__)

# -----------------------
# Database URL
# -----------------------
DATABASE_URL = settings.sqlalchemy_database_url
_url = make_url(DATABASE_URL)
IS_SQLITE = _url.get_backend_name() == "sqlite"

# Hide password in logs
logger.info(f"Connecting to database: {_url.render_as_string(hide_password=True)}")

# -----------------------
# SQLAlchemy engine
# -----------------------
if IS_SQLITE:
    engine = create_engine(
        DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        DATABASE_URL,
        echo=settings.debug and not settings.production,
        poolclass=QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,
        connect_args={"connect_timeout": 5},
    )


# -----------------------
# Per-connection settings
# -----------------------
@event.listens_for(engine, "connect")
def configure_connection(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    if IS_SQLITE:
        # Cascading deletes of replies and likes rely on FK enforcement
        cursor.execute("PRAGMA foreign_keys=ON")
    else:
        cursor.execute(f"SET timezone='{settings.timezone}'")
    cursor.close()


# -----------------------
# Test connection
# -----------------------
try:
    with engine.connect() as conn:
        logger.info("Database connection successful ✅")
except Exception as e:
    logger.error(f"Failed to connect to database ❌: {str(e)}")
    raise

# -----------------------
# Session and Base
# -----------------------
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


# -----------------------
# Dependency for FastAPI
# -----------------------
def get_db():
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database error occurred: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()


# -----------------------
# Query helpers
# -----------------------
LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """LIKE pattern matching `term` literally anywhere; pair with escape=LIKE_ESCAPE"""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
