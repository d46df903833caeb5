"""Tests for the notification inbox and the user directory."""

from unittest.mock import patch

import pytest

from insyd.services import InvalidArgument, NotFound
from insyd.services.inbox import InboxService

from tests.helpers import create_users


def sequential_timestamps(count):
    return [f"2025-11-01T12:00:{second:02d}.000000Z" for second in range(count)]


@pytest.fixture
def followed(services):
    """alice is followed by bob, carol and dave, in that order."""
    users = create_users(
        services, "alice@insyd.io", "bob@insyd.io", "carol@insyd.io", "dave@insyd.io"
    )
    with patch(
        "insyd.persistence.repositories.timestamp_now",
        side_effect=sequential_timestamps(6),
    ):
        for follower in ("bob@insyd.io", "carol@insyd.io", "dave@insyd.io"):
            services.relationships.follow(follower, "alice@insyd.io")
    return users


class TestInboxList:
    def test_newest_first_with_unread_count(self, services, followed):
        page = services.inbox.list("alice@insyd.io")

        assert [n.message for n in page.notifications] == [
            "dave@insyd.io is now following you",
            "carol@insyd.io is now following you",
            "bob@insyd.io is now following you",
        ]
        assert page.unread == 3

    def test_limit(self, services, followed):
        page = services.inbox.list("alice@insyd.io", limit=2)

        assert len(page.notifications) == 2
        assert page.notifications[0].message.startswith("dave@")
        # unread covers the whole inbox, not only this page
        assert page.unread == 3

    def test_default_limit_from_config(self, db, followed):
        page = InboxService(default_limit=1).list("alice@insyd.io")

        assert len(page.notifications) == 1

    def test_unknown_user_gets_empty_page(self, services):
        page = services.inbox.list("ghost@insyd.io")

        assert page.notifications == []
        assert page.unread == 0

    def test_email_required(self, services):
        with pytest.raises(InvalidArgument, match="Email parameter is required"):
            services.inbox.list("")

    def test_non_positive_limit(self, services):
        with pytest.raises(InvalidArgument):
            services.inbox.list("alice@insyd.io", limit=0)


class TestMarkRead:
    def test_mark_read(self, services, followed):
        notification = services.inbox.list("alice@insyd.io").notifications[0]

        services.inbox.mark_read(notification.id, "alice@insyd.io")

        page = services.inbox.list("alice@insyd.io")
        assert page.unread == 2
        assert page.notifications[0].read is True

    def test_mark_read_is_idempotent(self, services, followed):
        notification = services.inbox.list("alice@insyd.io").notifications[0]

        services.inbox.mark_read(notification.id, "alice@insyd.io")
        services.inbox.mark_read(notification.id, "alice@insyd.io")

        assert services.inbox.list("alice@insyd.io").unread == 2

    def test_other_users_notification_not_found(self, services, followed):
        """Test a foreign notification is indistinguishable from a missing one."""
        notification = services.inbox.list("alice@insyd.io").notifications[0]

        with pytest.raises(NotFound) as foreign:
            services.inbox.mark_read(notification.id, "bob@insyd.io")
        with pytest.raises(NotFound) as missing:
            services.inbox.mark_read("missing", "alice@insyd.io")
        with pytest.raises(NotFound) as unknown_user:
            services.inbox.mark_read(notification.id, "ghost@insyd.io")

        assert foreign.value.message == missing.value.message == unknown_user.value.message
        assert foreign.value.message == "Notification not found or not authorized"
        assert services.inbox.list("alice@insyd.io").unread == 3

    def test_missing_arguments(self, services):
        with pytest.raises(InvalidArgument, match="Missing notificationId or email"):
            services.inbox.mark_read(None, "alice@insyd.io")


class TestDirectory:
    def test_list_users(self, services, followed):
        services.content.create_blog("alice@insyd.io", "Title", "Body")
        services.relationships.follow("bob@insyd.io", "carol@insyd.io")

        entries = services.directory.list_users("bob@insyd.io")

        by_email = {entry.user.email: entry for entry in entries}
        assert set(by_email) == {"alice@insyd.io", "carol@insyd.io", "dave@insyd.io"}
        assert by_email["alice@insyd.io"].is_following is True
        assert by_email["alice@insyd.io"].followers == 3
        assert by_email["alice@insyd.io"].blogs == 1
        assert by_email["carol@insyd.io"].is_following is True
        assert by_email["carol@insyd.io"].following == 1
        assert by_email["dave@insyd.io"].is_following is False

    def test_current_user_required(self, services):
        with pytest.raises(InvalidArgument, match="Current user email is required"):
            services.directory.list_users(None)

    def test_unknown_current_user(self, services):
        with pytest.raises(NotFound, match="Current user not found"):
            services.directory.list_users("ghost@insyd.io")
