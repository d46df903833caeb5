"""Shared fixtures: in-memory database, inline email delivery, service wiring."""

import pytest
from fastapi.testclient import TestClient

from insyd.api import create_app
from insyd.config.environment import EnvironmentConfig
from insyd.logging.context import clear_log_context
from insyd.notifications.dispatcher import EmailDispatcher
from insyd.persistence import close_database, init_database
from insyd.services import build_services

from tests.helpers import RecordingSMTPClient, make_app_config

MEMORY_URL = "sqlite:///:memory:"


@pytest.fixture(autouse=True)
def clean_log_context():
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def env_config():
    return EnvironmentConfig(
        database_url=MEMORY_URL,
        smtp_host="smtp.insyd.test",
        smtp_port=2525,
        email_from="noreply@insyd.test",
    )


@pytest.fixture
def app_config():
    return make_app_config()


@pytest.fixture
def smtp():
    return RecordingSMTPClient()


@pytest.fixture
def db():
    init_database(MEMORY_URL)
    yield
    close_database()


@pytest.fixture
def dispatcher(env_config, app_config, smtp):
    dispatcher = EmailDispatcher(env_config, app_config.email, smtp_client=smtp)
    yield dispatcher
    dispatcher.shutdown(wait=True)


@pytest.fixture
def make_services(db, env_config, smtp):
    """Build services for a given AppConfig (defaults to make_app_config())."""
    dispatchers = []

    def _make(app_config=None):
        app_config = app_config or make_app_config()
        dispatcher = EmailDispatcher(env_config, app_config.email, smtp_client=smtp)
        dispatchers.append(dispatcher)
        return build_services(app_config, dispatcher)

    yield _make

    for dispatcher in dispatchers:
        dispatcher.shutdown(wait=True)


@pytest.fixture
def services(make_services, app_config):
    return make_services(app_config)


@pytest.fixture
def client(app_config, env_config, smtp):
    app = create_app(app_config, env_config, smtp_client=smtp)
    with TestClient(app) as test_client:
        yield test_client
