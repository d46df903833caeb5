"""Tests for the identity resolver."""

import threading
from unittest.mock import MagicMock

import pytest

from insyd.persistence import UserRepository, close_database, get_session, init_database
from insyd.services import IdentityService, InvalidArgument, NotFound


class TestResolveOrCreate:
    def test_creates_then_resolves(self, services):
        user, created = services.identity.resolve_or_create("alice@insyd.io", name="Alice")
        again, created_again = services.identity.resolve_or_create("alice@insyd.io", name="Other")

        assert created is True
        assert created_again is False
        assert again.id == user.id
        assert again.name == "Alice"

    def test_email_used_verbatim(self, services):
        """Test emails differing only in case are different users."""
        lower, _ = services.identity.resolve_or_create("alice@insyd.io")
        upper, created = services.identity.resolve_or_create("Alice@insyd.io")

        assert created is True
        assert lower.id != upper.id

    def test_find(self, services):
        user, _ = services.identity.resolve_or_create("alice@insyd.io")

        assert services.identity.find("alice@insyd.io").id == user.id
        with pytest.raises(NotFound, match="User not found"):
            services.identity.find("nobody@insyd.io")

    def test_concurrent_callers_share_one_row(self, tmp_path):
        """Test racing creators of the same email all get the same user."""
        init_database(f"sqlite:///{tmp_path / 'race.db'}")
        try:
            identity = IdentityService()
            workers = 8
            barrier = threading.Barrier(workers)
            results, errors = [], []

            def resolve():
                barrier.wait()
                try:
                    results.append(identity.resolve_or_create("race@insyd.io"))
                except Exception as e:
                    errors.append(e)

            threads = [threading.Thread(target=resolve) for _ in range(workers)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

            assert errors == []
            assert len({user.id for user, _ in results}) == 1
            assert sum(1 for _, created in results if created) == 1
            with get_session() as session:
                assert len(UserRepository(session).list_all()) == 1
        finally:
            close_database()


class TestRegister:
    def test_register_sends_welcome_once(self, services, smtp):
        user, created = services.identity.register("dana@insyd.io", name="Dana")
        _, created_again = services.identity.register("dana@insyd.io")

        assert created is True
        assert created_again is False
        assert user.name == "Dana"
        assert smtp.recipients() == ["dana@insyd.io"]
        assert smtp.subjects() == ["Welcome to Insyd!"]

    @pytest.mark.parametrize("email", [None, "", "   "])
    def test_email_required(self, services, email):
        with pytest.raises(InvalidArgument, match="Email is required"):
            services.identity.register(email)

    def test_blank_name_stored_as_none(self, services):
        user, _ = services.identity.register("dana@insyd.io", name="  ")

        assert user.name is None

    def test_welcome_disabled(self, db):
        fanout = MagicMock()
        identity = IdentityService(fanout, send_welcome_email=False)

        identity.register("dana@insyd.io")

        fanout.send_welcome.assert_not_called()

    def test_welcome_failure_does_not_fail_registration(self, make_services, smtp):
        smtp.fail_for.add("dana@insyd.io")
        services = make_services()

        user, created = services.identity.register("dana@insyd.io")

        assert created is True
        assert smtp.attempts == ["dana@insyd.io"]
        assert services.identity.find("dana@insyd.io").id == user.id
