"""Audience policies for the fan-out engine.

An audience policy is a pure function of the event and two lookups; it never
touches the database itself. Content events (new blog, new job) are routed by
the configured policy. Interaction events always go to the single
counterparty, and only when the counterparty is not the actor.
"""

import logging
from typing import Callable, Dict, List

from insyd.domain.models import NotificationType, User

from .models import NotificationEvent

logger = logging.getLogger(__name__)

FollowerLookup = Callable[[str], List[User]]
AllUsersLookup = Callable[[], List[User]]
AudiencePolicy = Callable[[NotificationEvent, FollowerLookup, AllUsersLookup], List[User]]


def _exclude_actor(users: List[User], actor: User) -> List[User]:
    seen = set()
    audience = []
    for user in users:
        if user.id == actor.id or user.id in seen:
            continue
        seen.add(user.id)
        audience.append(user)
    return audience


def counterparty_audience(event: NotificationEvent) -> List[User]:
    """Exactly the counterparty, or nobody when it is the actor."""
    if event.counterparty is None or event.counterparty.id == event.actor.id:
        return []
    return [event.counterparty]


def followers_audience(
    event: NotificationEvent,
    followers_of: FollowerLookup,
    all_users: AllUsersLookup,
) -> List[User]:
    """Content events reach the author's current followers."""
    return _exclude_actor(followers_of(event.actor.id), event.actor)


def broadcast_audience(
    event: NotificationEvent,
    followers_of: FollowerLookup,
    all_users: AllUsersLookup,
) -> List[User]:
    """Content events reach every user except the author."""
    return _exclude_actor(all_users(), event.actor)


AUDIENCE_POLICIES: Dict[str, AudiencePolicy] = {
    "followers": followers_audience,
    "broadcast": broadcast_audience,
}


def get_audience_policy(mode: str) -> AudiencePolicy:
    """Look up an audience policy by its configured name.

    Raises:
        ValueError: If mode is not a known policy
    """
    policy = AUDIENCE_POLICIES.get(str(mode).lower())
    if policy is None:
        supported = ", ".join(sorted(AUDIENCE_POLICIES))
        raise ValueError(f"Unknown audience mode: {mode}. Supported modes: {supported}")
    return policy


def compute_audience(
    event: NotificationEvent,
    mode: str,
    followers_of: FollowerLookup,
    all_users: AllUsersLookup,
) -> List[User]:
    """Compute the recipients of an event.

    Args:
        event: Triggering event
        mode: Audience policy name used for content events
        followers_of: Returns the followers of a user id
        all_users: Returns every user

    Returns:
        Recipients, never including the actor
    """
    if NotificationType(event.type).is_content_event:
        audience = get_audience_policy(mode)(event, followers_of, all_users)
    else:
        audience = counterparty_audience(event)

    logger.debug(
        "Computed audience",
        extra={
            "event_type": event.event_type,
            "audience_mode": mode,
            "recipients": len(audience),
        },
    )
    return audience
