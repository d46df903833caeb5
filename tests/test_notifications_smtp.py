"""Unit tests for SMTP client wrapper.

Tests the SMTPClient for:
- Connection handling (SMTP and SMTP_SSL)
- STARTTLS negotiation
- Authentication (with and without credentials)
- Error wrapping and connection cleanup
- Sender address and message building
"""

import smtplib
from email.message import EmailMessage
from unittest.mock import MagicMock

import pytest

from insyd.config.environment import EnvironmentConfig
from insyd.notifications.models import OutboundEmail, SMTPDeliveryError
from insyd.notifications.smtp_client import SMTPClient, build_message, build_sender_address


@pytest.fixture
def env_config_with_auth():
    """Environment config with SMTP authentication."""
    return EnvironmentConfig(
        smtp_host="smtp.insyd.io",
        smtp_port=587,
        smtp_user="mailer@insyd.io",
        smtp_pass="secret123",
    )


@pytest.fixture
def env_config_implicit_tls():
    """Environment config for implicit TLS (port 465)."""
    return EnvironmentConfig(
        smtp_host="smtp.insyd.io",
        smtp_port=465,
        smtp_user="mailer@insyd.io",
        smtp_pass="secret123",
    )


@pytest.fixture
def message():
    return build_message(
        OutboundEmail(recipient="bob@insyd.io", subject="Hello", text_body="Hi Bob"),
        "Insyd <noreply@insyd.io>",
    )


def make_client():
    smtp = MagicMock()
    smtp_ssl = MagicMock()
    client = SMTPClient(smtp_factory=smtp, smtp_ssl_factory=smtp_ssl)
    return client, smtp, smtp_ssl


class TestSMTPClient:
    def test_starttls_and_login(self, env_config_with_auth, message):
        client, smtp_factory, smtp_ssl_factory = make_client()

        client.send(message, env_config_with_auth)

        smtp_factory.assert_called_once_with("smtp.insyd.io", 587)
        smtp_ssl_factory.assert_not_called()
        connection = smtp_factory.return_value
        connection.starttls.assert_called_once()
        connection.login.assert_called_once_with("mailer@insyd.io", "secret123")
        connection.send_message.assert_called_once_with(message)
        connection.quit.assert_called_once()

    def test_no_tls_no_auth(self, message):
        client, smtp_factory, _ = make_client()
        env_config = EnvironmentConfig(smtp_host="localhost", smtp_port=25)

        client.send(message, env_config, use_tls=False)

        connection = smtp_factory.return_value
        connection.starttls.assert_not_called()
        connection.login.assert_not_called()
        connection.send_message.assert_called_once_with(message)

    def test_implicit_tls_on_465(self, env_config_implicit_tls, message):
        client, smtp_factory, smtp_ssl_factory = make_client()

        client.send(message, env_config_implicit_tls)

        smtp_factory.assert_not_called()
        args, kwargs = smtp_ssl_factory.call_args
        assert args == ("smtp.insyd.io", 465)
        assert "context" in kwargs
        smtp_ssl_factory.return_value.starttls.assert_not_called()
        smtp_ssl_factory.return_value.send_message.assert_called_once_with(message)

    def test_smtp_error_wrapped_and_connection_closed(self, env_config_with_auth, message):
        client, smtp_factory, _ = make_client()
        connection = smtp_factory.return_value
        connection.send_message.side_effect = smtplib.SMTPRecipientsRefused({})

        with pytest.raises(SMTPDeliveryError, match="SMTP error"):
            client.send(message, env_config_with_auth)

        connection.quit.assert_called_once()

    def test_auth_failure_wrapped(self, env_config_with_auth, message):
        client, smtp_factory, _ = make_client()
        smtp_factory.return_value.login.side_effect = smtplib.SMTPAuthenticationError(
            535, b"bad credentials"
        )

        with pytest.raises(SMTPDeliveryError):
            client.send(message, env_config_with_auth)

        smtp_factory.return_value.send_message.assert_not_called()

    def test_connection_error_wrapped(self, env_config_with_auth, message):
        client, smtp_factory, _ = make_client()
        smtp_factory.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(SMTPDeliveryError, match="Network error"):
            client.send(message, env_config_with_auth)

    def test_quit_failure_is_not_raised(self, env_config_with_auth, message):
        client, smtp_factory, _ = make_client()
        smtp_factory.return_value.quit.side_effect = smtplib.SMTPServerDisconnected()

        client.send(message, env_config_with_auth)

        smtp_factory.return_value.send_message.assert_called_once()


class TestSenderAddress:
    def test_email_from_preferred(self):
        env_config = EnvironmentConfig(
            smtp_host="smtp.insyd.io",
            smtp_user="mailer@insyd.io",
            smtp_pass="x",
            email_from="hello@insyd.io",
        )

        assert build_sender_address(env_config) == "Insyd <hello@insyd.io>"

    def test_falls_back_to_smtp_user(self):
        env_config = EnvironmentConfig(
            smtp_host="smtp.insyd.io", smtp_user="mailer@insyd.io", smtp_pass="x"
        )

        assert build_sender_address(env_config) == "Insyd <mailer@insyd.io>"

    def test_falls_back_to_host(self):
        env_config = EnvironmentConfig(smtp_host="smtp.insyd.io", smtp_sender_name="Insyd Alerts")

        assert build_sender_address(env_config) == "Insyd Alerts <noreply@smtp.insyd.io>"


class TestBuildMessage:
    def test_text_only(self, message):
        assert isinstance(message, EmailMessage)
        assert message["To"] == "bob@insyd.io"
        assert message["From"] == "Insyd <noreply@insyd.io>"
        assert message["Subject"] == "Hello"
        assert not message.is_multipart()
        assert message.get_content().strip() == "Hi Bob"

    def test_with_html_alternative(self):
        email = OutboundEmail(
            recipient="bob@insyd.io",
            subject="Hello",
            text_body="Hi Bob",
            html_body="<p>Hi Bob</p>",
        )

        message = build_message(email, "Insyd <noreply@insyd.io>")

        assert message.is_multipart()
        assert message.get_content_type() == "multipart/alternative"
        html = message.get_body(preferencelist=("html",))
        assert "<p>Hi Bob</p>" in html.get_content()
