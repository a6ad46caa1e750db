from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from fastapi import Request
from marketplace.core.config import Settings

# Create Base class for SQLAlchemy models
Base = declarative_base()


class Database:
    """Owns the engine and session factory for one application instance"""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        engine = create_engine(
            settings.DATABASE_URL,
            echo=settings.SQL_ECHO,
            pool_pre_ping=True,
            pool_recycle=300,
        )
        return cls(engine)

    def session(self):
        return self.SessionLocal()

    def dispose(self):
        self.engine.dispose()


# Dependency to get database session
def get_db(request: Request):
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()
