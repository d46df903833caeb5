"""Domain services used by the HTTP layer and the CLI.

build_services() wires every service to one FanOutEngine, which in turn
holds the shared EmailDispatcher.
"""

from dataclasses import dataclass
from typing import Optional

from insyd.config.models import AppConfig
from insyd.notifications.dispatcher import EmailDispatcher
from insyd.notifications.fanout import FanOutEngine, SessionFactory
from insyd.notifications.templates import TemplateRenderer
from insyd.persistence import get_session

from .content import ContentService, CreatedContent
from .directory import DirectoryService
from .errors import (
    AlreadyExists,
    InsydError,
    InternalError,
    InvalidArgument,
    NotFound,
    Unauthorized,
)
from .identity import IdentityService
from .inbox import InboxPage, InboxService
from .interactions import InteractionService, LikeOutcome
from .relationships import RelationshipService


@dataclass
class Services:
    identity: IdentityService
    relationships: RelationshipService
    content: ContentService
    interactions: InteractionService
    inbox: InboxService
    directory: DirectoryService
    fanout: FanOutEngine


def build_services(
    app_config: AppConfig,
    dispatcher: EmailDispatcher,
    template_renderer: Optional[TemplateRenderer] = None,
    session_factory: SessionFactory = get_session,
) -> Services:
    """Create every service from configuration.

    Args:
        app_config: Validated application configuration
        dispatcher: Shared email dispatcher
        template_renderer: Renderer (creates default if None)
        session_factory: Context manager yielding a transactional session

    Returns:
        Services container
    """
    notifications = app_config.notifications
    fanout = FanOutEngine(
        notifications,
        dispatcher,
        template_renderer=template_renderer,
        session_factory=session_factory,
    )
    return Services(
        identity=IdentityService(
            fanout,
            send_welcome_email=app_config.email.send_welcome_email,
            session_factory=session_factory,
        ),
        relationships=RelationshipService(fanout, session_factory=session_factory),
        content=ContentService(
            fanout,
            notify_on_content_removed=notifications.notify_on_content_removed,
            session_factory=session_factory,
        ),
        interactions=InteractionService(
            fanout, like_policy=notifications.like_policy, session_factory=session_factory
        ),
        inbox=InboxService(notifications.inbox_limit, session_factory=session_factory),
        directory=DirectoryService(session_factory=session_factory),
        fanout=fanout,
    )


__all__ = [
    "Services",
    "build_services",
    "IdentityService",
    "RelationshipService",
    "ContentService",
    "CreatedContent",
    "InteractionService",
    "LikeOutcome",
    "InboxService",
    "InboxPage",
    "DirectoryService",
    "InsydError",
    "InvalidArgument",
    "NotFound",
    "Unauthorized",
    "AlreadyExists",
    "InternalError",
]
