from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from server.config import config

# =========================================================
# DATABASE SETUP
# =========================================================
connect_args = {}
if config.DATABASE_URL.startswith("sqlite"):
    # Scheduler jobs and request handlers use sessions from different threads
    connect_args = {"check_same_thread": False}

engine = create_engine(config.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_database(bind=None):
    """Create all tables that do not exist yet."""
    # Import models so they register on Base.metadata
    import server.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
