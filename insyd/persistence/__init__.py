"""Persistence layer for database operations.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine
    - ping_database() -> None

    # Repository classes (one per table group, all take a Session)
    - UserRepository, FollowRepository, BlogRepository, JobRepository,
      LikeRepository, ApplicationRepository, NotificationRepository

    # Exceptions
    - PersistenceError and subclasses

Example usage:
    >>> from insyd.persistence import init_database, get_session, UserRepository
    >>>
    >>> init_database("sqlite:///./data/insyd.db")
    >>>
    >>> with get_session() as session:
    ...     user = UserRepository(session).get_by_email("a@x.com")
"""

from .database import close_database, get_engine, get_session, init_database, ping_database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import (
    ApplicationRepository,
    BlogRepository,
    FollowRepository,
    JobRepository,
    LikeRepository,
    NotificationRepository,
    UserRepository,
)

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "ping_database",
    # Repositories
    "UserRepository",
    "FollowRepository",
    "BlogRepository",
    "JobRepository",
    "LikeRepository",
    "ApplicationRepository",
    "NotificationRepository",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
