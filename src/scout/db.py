from pathlib import Path
from sqlalchemy.engine import make_url
from sqlmodel import SQLModel, create_engine, Session
from scout.config import settings
from scout.logging import logger

DB_URL = settings.DATABASE_URL

engine = create_engine(DB_URL, echo=False)

def init_db():
    url = make_url(DB_URL)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    # Import all models here so SQLModel knows about them
    # This is critical for create_all to work
    from scout.models import report, memory, notification  # noqa: F401

    logger.info(f"Initializing database at {DB_URL}")
    SQLModel.metadata.create_all(engine)

def get_session():
    with Session(engine) as session:
        yield session
