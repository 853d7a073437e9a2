# backend/database.py
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from dotenv import load_dotenv

from config import settings

load_dotenv()

# 1. Database URL from the environment (.env) or the local SQLite default
SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

# 2. Hosted Postgres providers still hand out postgres:// URLs, SQLAlchemy wants postgresql://
if SQLALCHEMY_DATABASE_URL and SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)


def engine_options(url: str) -> dict:
    """Connection arguments bounding every round trip by the configured timeout."""
    timeout = settings.DB_STATEMENT_TIMEOUT_SECONDS
    if "sqlite" in url:
        # SQLite only: wait at most `timeout` seconds for the write lock
        return {"connect_args": {"check_same_thread": False, "timeout": timeout}}
    return {
        "connect_args": {
            "connect_timeout": timeout,
            "options": f"-c statement_timeout={timeout * 1000}",
        },
        "pool_pre_ping": True,
    }


def use_immediate_transactions(engine):
    """
    File-backed SQLite: every transaction takes the write lock up front
    (BEGIN IMMEDIATE), so concurrent writers queue on the busy timeout instead
    of failing when two of them try to upgrade a read lock at the same time.
    """
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def _is_file_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and url not in ("sqlite://", "sqlite:///:memory:")


engine = create_engine(SQLALCHEMY_DATABASE_URL, **engine_options(SQLALCHEMY_DATABASE_URL))
if _is_file_sqlite(SQLALCHEMY_DATABASE_URL):
    use_immediate_transactions(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    # Register every model on Base.metadata before creating tables
    import models.unit, models.function, models.users, models.accommodation, models.room  # noqa: F401
    import models.employee, models.product, models.movement, models.invoice  # noqa: F401
    import models.transfer, models.log, models.inspection, models.work_log  # noqa: F401
    Base.metadata.create_all(bind=engine)
