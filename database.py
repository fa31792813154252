from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from config.environment import signal_db_URI
from models.base import Base


def make_session_factory(db_URI=signal_db_URI):
    """Create the engine for the shared signal store and make sure its tables exist."""
    connect_args = {"check_same_thread": False} if db_URI.startswith("sqlite") else {}
    engine = create_engine(db_URI, connect_args=connect_args)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
