import logging

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import scoped_session, sessionmaker

from models.base_model import Base
from services.errors import StorageError

logger = logging.getLogger(__name__)


class DBStorage:
    """Engine plus a request-scoped session; one instance per application."""

    def __init__(self, database_url: str, echo: bool = False):
        """Initialize engine for the configured database"""
        self.__session = None
        if database_url.startswith("sqlite"):
            self.__engine = create_engine(database_url, echo=echo)

            # Enable SQLite foreign keys (needed for ON DELETE CASCADE)
            @event.listens_for(self.__engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()
        else:
            self.__engine = create_engine(database_url, echo=echo, pool_pre_ping=True, pool_size=10)

    def reload(self):
        """Create tables and start session"""
        Base.metadata.create_all(self.__engine)
        session_factory = sessionmaker(bind=self.__engine, expire_on_commit=False)
        self.__session = scoped_session(session_factory)

    def new(self, obj):
        """Add object to session"""
        self.__session.add(obj)

    def save(self):
        """Commit session; database failures surface as StorageError"""
        try:
            self.__session.commit()
        except SQLAlchemyError as exc:
            self.__session.rollback()
            logger.error("Commit failed: %s", exc.__class__.__name__)
            raise StorageError() from exc

    def delete(self, obj=None):
        """Delete object if exists (hard delete, not committed)"""
        if obj is not None:
            self.__session.delete(obj)

    def get(self, cls, id):
        """Fetch one object by class and ID"""
        return self.__session.get(cls, id)

    def close(self):
        """Remove session (for API teardown)"""
        if self.__session is not None:
            self.__session.remove()

    def dispose(self):
        self.close()
        self.__engine.dispose()

    # expose the SQLAlchemy session for filtered queries
    def get_session(self):
        return self.__session
