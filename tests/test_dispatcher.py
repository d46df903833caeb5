"""Unit tests for the email dispatcher."""

import logging
import threading

import pytest

from insyd.config.environment import EnvironmentConfig
from insyd.config.models import EmailConfig
from insyd.logging.context import get_log_context, log_context
from insyd.notifications.dispatcher import EmailDispatcher
from insyd.notifications.models import OutboundEmail

from tests.helpers import RecordingSMTPClient


def email_to(recipient):
    return OutboundEmail(recipient=recipient, subject="Hello", text_body="Hi")


@pytest.fixture
def smtp_env():
    return EnvironmentConfig(smtp_host="smtp.insyd.test", smtp_port=2525)


def make_dispatcher(env_config, smtp, **email):
    return EmailDispatcher(env_config, EmailConfig(**email), smtp_client=smtp)


class TestEnabled:
    def test_disabled_without_smtp_host(self):
        smtp = RecordingSMTPClient()
        dispatcher = make_dispatcher(EnvironmentConfig(), smtp)

        assert dispatcher.enabled is False
        assert dispatcher.submit(email_to("bob@insyd.io")) is False
        assert smtp.attempts == []
        assert dispatcher.started is False

    def test_disabled_by_config(self, smtp_env):
        smtp = RecordingSMTPClient()
        dispatcher = make_dispatcher(smtp_env, smtp, enabled=False)

        assert dispatcher.enabled is False
        assert dispatcher.submit(email_to("bob@insyd.io")) is False


class TestInlineDelivery:
    def test_delivers_in_caller(self, smtp_env):
        smtp = RecordingSMTPClient()
        dispatcher = make_dispatcher(smtp_env, smtp, delivery_mode="inline")

        assert dispatcher.submit(email_to("bob@insyd.io")) is True

        assert smtp.recipients() == ["bob@insyd.io"]
        assert dispatcher.started is False
        assert smtp.sent[0]["From"] == "Insyd <noreply@smtp.insyd.test>"

    def test_failure_is_logged_not_raised(self, smtp_env, caplog):
        """Test a failed send is attempted once, logged and dropped."""
        smtp = RecordingSMTPClient(fail_for={"bob@insyd.io"})
        dispatcher = make_dispatcher(smtp_env, smtp, delivery_mode="inline")

        with caplog.at_level(logging.ERROR, logger="insyd.notifications.dispatcher"):
            assert dispatcher.submit(email_to("bob@insyd.io")) is True
            dispatcher.submit(email_to("carol@insyd.io"))

        assert smtp.attempts == ["bob@insyd.io", "carol@insyd.io"]
        assert smtp.recipients() == ["carol@insyd.io"]
        failures = [r for r in caplog.records if getattr(r, "event", None) == "email.send.failure"]
        assert len(failures) == 1
        assert failures[0].recipient == "bob@insyd.io"

    def test_unexpected_error_is_contained(self, smtp_env):
        class BrokenSMTP(RecordingSMTPClient):
            def send(self, message, env_config, use_tls=True):
                raise RuntimeError("boom")

        dispatcher = make_dispatcher(smtp_env, BrokenSMTP(), delivery_mode="inline")

        assert dispatcher.submit(email_to("bob@insyd.io")) is True


class TestBackgroundDelivery:
    def test_worker_pool_started_lazily(self, smtp_env):
        smtp = RecordingSMTPClient()
        dispatcher = make_dispatcher(smtp_env, smtp, max_workers=2)
        assert dispatcher.started is False

        for recipient in ("a@insyd.io", "b@insyd.io", "c@insyd.io"):
            assert dispatcher.submit(email_to(recipient)) is True
        assert dispatcher.started is True

        dispatcher.shutdown(wait=True)

        assert sorted(smtp.recipients()) == ["a@insyd.io", "b@insyd.io", "c@insyd.io"]
        assert dispatcher.started is False

    def test_one_failure_does_not_affect_others(self, smtp_env):
        smtp = RecordingSMTPClient(fail_for={"b@insyd.io"})
        dispatcher = make_dispatcher(smtp_env, smtp)

        for recipient in ("a@insyd.io", "b@insyd.io", "c@insyd.io"):
            dispatcher.submit(email_to(recipient))
        dispatcher.shutdown(wait=True)

        assert sorted(smtp.attempts) == ["a@insyd.io", "b@insyd.io", "c@insyd.io"]
        assert sorted(smtp.recipients()) == ["a@insyd.io", "c@insyd.io"]

    def test_workers_inherit_log_context(self, smtp_env):
        seen = {}
        done = threading.Event()

        class ContextSMTP(RecordingSMTPClient):
            def send(self, message, env_config, use_tls=True):
                seen.update(get_log_context())
                done.set()

        dispatcher = make_dispatcher(smtp_env, ContextSMTP())
        with log_context(event_type="like", actor="bob@insyd.io"):
            dispatcher.submit(email_to("alice@insyd.io"))

        assert done.wait(timeout=5)
        dispatcher.shutdown(wait=True)
        assert seen == {"event_type": "like", "actor": "bob@insyd.io"}

    def test_submit_after_shutdown_is_dropped(self, smtp_env, caplog):
        smtp = RecordingSMTPClient()
        dispatcher = make_dispatcher(smtp_env, smtp)
        dispatcher.shutdown(wait=True)

        with caplog.at_level(logging.WARNING, logger="insyd.notifications.dispatcher"):
            assert dispatcher.submit(email_to("bob@insyd.io")) is False

        assert smtp.attempts == []
        assert any("shut down" in r.getMessage() for r in caplog.records)

    def test_shutdown_racing_submit_starts_no_pool(self, smtp_env):
        """Test a submit blocked while the dispatcher closes starts no worker pool."""
        smtp = RecordingSMTPClient()
        dispatcher = make_dispatcher(smtp_env, smtp)
        outcome = {}

        def submit():
            outcome["queued"] = dispatcher.submit(email_to("bob@insyd.io"))

        worker = threading.Thread(target=submit)
        with dispatcher._lock:
            worker.start()
            worker.join(timeout=0.2)
            dispatcher._closed = True
        worker.join(timeout=5)

        assert outcome == {"queued": False}
        assert dispatcher.started is False
        assert smtp.attempts == []

    def test_inline_submit_after_shutdown_is_dropped(self, smtp_env):
        smtp = RecordingSMTPClient()
        dispatcher = make_dispatcher(smtp_env, smtp, delivery_mode="inline")
        dispatcher.shutdown(wait=True)

        assert dispatcher.submit(email_to("bob@insyd.io")) is False
        assert smtp.attempts == []

    def test_shutdown_is_idempotent(self, smtp_env):
        dispatcher = make_dispatcher(smtp_env, RecordingSMTPClient())
        dispatcher.submit(email_to("bob@insyd.io"))

        dispatcher.shutdown(wait=True)
        dispatcher.shutdown(wait=True)

        assert dispatcher.started is False
