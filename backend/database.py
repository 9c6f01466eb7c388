import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from config import DATABASE_URL, LOG_LEVEL
import logging

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

_IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")

# Only use connect_args if we are using SQLite
engine_args = {}
if DATABASE_URL.startswith("sqlite"):
    engine_args["connect_args"] = {"check_same_thread": False}
    if DATABASE_URL in _IN_MEMORY_URLS:
        # One shared connection, otherwise every session sees an empty database
        engine_args["poolclass"] = StaticPool
else:
    # Production settings for PostgreSQL
    engine_args.update({
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 1800,
    })

try:
    engine = create_engine(
        DATABASE_URL,
        **engine_args,
        echo=False,
    )
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
except Exception as e:
    logger.error(f"Failed to create engine: {e}")
    raise

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a database session and closes it after use."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _sqlite_file_dir() -> str | None:
    if not DATABASE_URL.startswith("sqlite:///") or DATABASE_URL in _IN_MEMORY_URLS:
        return None
    return os.path.dirname(DATABASE_URL[len("sqlite:///"):]) or None


def init_db():
    """Create the SQLite data directory if needed, then create all tables."""
    data_dir = _sqlite_file_dir()
    if data_dir:
        os.makedirs(data_dir, exist_ok=True)

    # Import all models so they register with Base.metadata
    import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized successfully.")
