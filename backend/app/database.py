import logging

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL

logger = logging.getLogger(__name__)

Base = declarative_base()

engine = None
SessionLocal = None


def _normalize_database_url(url: str) -> str:
    # `.env` files often carry `mysql://...`; SQLAlchemy needs the driver form.
    return url.replace("mysql://", "mysql+pymysql://", 1) if url.startswith("mysql://") else url


def _sqlite_on_connect(dbapi_connection, connection_record):  # noqa: ANN001
    try:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.execute("PRAGMA busy_timeout=30000;")
        cursor.close()
    except Exception as e:
        logger.warning("Failed to set SQLite pragmas: %s", e)


def configure_engine(url: str):
    """(Re)bind the module-level engine and session factory to `url`."""
    global engine, SessionLocal

    url = _normalize_database_url((url or "").strip())
    kwargs = {"pool_pre_ping": True}
    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        # FastAPI runs sync handlers in a threadpool.
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}

    new_engine = create_engine(url, **kwargs)
    if is_sqlite:
        event.listen(new_engine, "connect", _sqlite_on_connect)

    if engine is not None:
        engine.dispose()
    engine = new_engine
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return engine


configure_engine(DATABASE_URL)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def import_models() -> None:
    # Registers every mapped class so relationships resolve and create_all sees all tables.
    from .models import application, candidate_profile, job_posting, recruiter_profile, user  # noqa: F401


def init_db(drop_existing: bool = False):
    import_models()
    if drop_existing:
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
