import logging

from sqlmodel import create_engine, SQLModel, Session

from .config import DATABASE_URL, SQL_ECHO

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, echo=SQL_ECHO, connect_args=connect_args)


def create_db_and_tables(bind=None):
    """
    Creates the user document table if it does not exist yet.
    """
    logger.info("Creating database and tables...")
    SQLModel.metadata.create_all(bind or engine, checkfirst=True)
    logger.info("Database and tables ready.")


def get_session():
    """
    A FastAPI dependency to provide a database session to endpoints.
    """
    with Session(engine) as session:
        yield session
