# File: mediaconv/core/database/connection.py

from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from mediaconv.core.config.settings import settings

_url = make_url(settings.DATABASE_URL)
_is_sqlite = _url.get_backend_name() == "sqlite"

# check_same_thread=False is needed only for SQLite, where request handlers
# and worker threads share one file.
connect_args = {"check_same_thread": False} if _is_sqlite else {}

if _is_sqlite and _url.database and _url.database != ":memory:":
    Path(_url.database).parent.mkdir(parents=True, exist_ok=True)

engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
    connect_args=connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Creates the ledger tables if they are missing."""
    from mediaconv.core.database.base import Base
    import mediaconv.core.jobs.models  # noqa: F401 (registers JobModel)

    Base.metadata.create_all(bind=engine)
