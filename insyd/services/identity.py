"""Identity resolver: maps a bare email string to a user.

Emails are used verbatim (no case folding or trimming). Registration is the
only path that creates users; every other operation looks users up strictly.
"""

from typing import Callable, ContextManager, Optional, Tuple

from sqlalchemy.orm import Session

from insyd.domain.models import User
from insyd.logging import get_logger
from insyd.notifications.fanout import FanOutEngine
from insyd.persistence import DataIntegrityError, UserRepository, get_session

from .errors import InvalidArgument, NotFound

logger = get_logger(__name__, component="identity")

SessionFactory = Callable[[], ContextManager[Session]]


def is_blank(value: Optional[str]) -> bool:
    return value is None or not isinstance(value, str) or not value.strip()


def require_fields(message: str, *values: Optional[str]) -> None:
    """Raise InvalidArgument(message) if any value is missing or blank."""
    if any(is_blank(value) for value in values):
        raise InvalidArgument(message)


def require_user(session: Session, email: str, message: str = "User not found") -> User:
    """Strict lookup inside an existing session.

    Raises:
        NotFound: If no user has exactly this email
    """
    user = UserRepository(session).get_by_email(email)
    if user is None:
        raise NotFound(message)
    return user


class IdentityService:
    """Resolves and registers users by email."""

    def __init__(
        self,
        fanout: Optional[FanOutEngine] = None,
        send_welcome_email: bool = True,
        session_factory: SessionFactory = get_session,
    ):
        self.fanout = fanout
        self.send_welcome_email = send_welcome_email
        self.session_factory = session_factory

    def find(self, email: str) -> User:
        """Look up an existing user.

        Raises:
            NotFound: If the email is unknown
        """
        with self.session_factory() as session:
            return require_user(session, email)

    def resolve_or_create(self, email: str, name: Optional[str] = None) -> Tuple[User, bool]:
        """Return the user for email, creating it if absent.

        Concurrent callers with the same email get the same row: a losing
        insert fails on the unique email constraint in its own transaction
        and the winner's row is read back.

        Returns:
            Tuple of (user, created)
        """
        with self.session_factory() as session:
            existing = UserRepository(session).get_by_email(email)
        if existing is not None:
            return existing, False

        try:
            with self.session_factory() as session:
                user = UserRepository(session).create(email, name=name)
        except DataIntegrityError:
            with self.session_factory() as session:
                winner = UserRepository(session).get_by_email(email)
            if winner is None:
                raise
            logger.debug(
                "Lost user creation race, using existing row",
                extra={"event": "identity.create.race_lost"},
            )
            return winner, False

        logger.info(
            f"Created user {user.email}",
            extra={"event": "identity.user.created", "user_id": user.id},
        )
        return user, True

    def register(self, email: str, name: Optional[str] = None) -> Tuple[User, bool]:
        """Register (or re-resolve) a user; new users get a welcome email.

        Raises:
            InvalidArgument: If email is missing

        Returns:
            Tuple of (user, created)
        """
        require_fields("Email is required", email)
        if name is not None and is_blank(name):
            name = None

        user, created = self.resolve_or_create(email, name=name)

        if created and self.send_welcome_email and self.fanout is not None:
            self.fanout.send_welcome(user)

        return user, created
