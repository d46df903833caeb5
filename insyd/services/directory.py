"""User directory: every other user with follow status and counts."""

from typing import Callable, ContextManager, List

from sqlalchemy.orm import Session

from insyd.domain.models import UserSummary
from insyd.persistence import UserRepository, get_session

from .identity import require_fields, require_user

SessionFactory = Callable[[], ContextManager[Session]]


class DirectoryService:
    def __init__(self, session_factory: SessionFactory = get_session):
        self.session_factory = session_factory

    def list_users(self, current_user_email: str) -> List[UserSummary]:
        """Users other than the requester, newest first.

        Raises:
            InvalidArgument: Missing email
            NotFound: Unknown requester
        """
        require_fields("Current user email is required", current_user_email)

        with self.session_factory() as session:
            current = require_user(session, current_user_email, "Current user not found")
            return UserRepository(session).list_directory(current.id)
