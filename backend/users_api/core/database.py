from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Base class for all database models
# All models inherit from this to get SQLAlchemy ORM functionality
Base = declarative_base()


class Database:
    """
    Owns the engine (connection pool) and the session factory.

    One instance is created by the application factory and shared by all
    requests through ``app.state``; each request gets its own session.
    """

    def __init__(self, url: str):
        kwargs = {}
        if url.startswith("sqlite"):
            # SQLite connections are bound to the creating thread by default,
            # FastAPI runs sync dependencies in a thread pool
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
                # Every connection to :memory: is a new empty database
                kwargs["poolclass"] = StaticPool
        self.engine = create_engine(url, **kwargs)
        # autocommit=False: Changes require explicit commit
        # autoflush=False: Don't auto-flush before queries
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self):
        """Create missing tables for every model registered on Base"""
        # Import models so they are registered on Base.metadata
        from users_api.models import credential, location, user  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()


def get_db(request: Request):
    """
    Dependency for getting database session.

    The session is closed after the request completes (via finally block),
    even if the route handler raised.
    """
    db = request.app.state.database.SessionLocal()
    try:
        yield db
    finally:
        db.close()
