import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("USE_IN_MEMORY_STORE", "true")
os.environ.setdefault("EMAIL_SEND_DELAY_MS", "0")

import pytest
from fastapi.testclient import TestClient

from checkin import crud
from checkin.core.config import settings
from checkin.core.deps import get_email_service
from checkin.db.sheets import InMemoryRowStore, get_store
from checkin.main import app


class FakeEmailService:
    """Records outgoing messages instead of talking to SMTP."""

    def __init__(self):
        self.sent = []
        self.fail_for = set()
        self.raise_for = set()

    def send_email(self, to_emails, subject, html_content, text_content=None, attachments=None, cc_emails=None):
        recipient = to_emails[0]
        if recipient in self.raise_for:
            raise RuntimeError("connection reset")
        self.sent.append({
            "to": list(to_emails),
            "subject": subject,
            "html": html_content,
            "text": text_content,
            "attachments": attachments or [],
            "cc": cc_emails,
        })
        return recipient not in self.fail_for


@pytest.fixture
def store():
    store = InMemoryRowStore()
    crud.ticket.initialize(store)
    crud.badge.initialize(store)
    return store


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def app_overrides(store, email_service):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_email_service] = lambda: email_service
    yield
    app.dependency_overrides.clear()


def login(client, password):
    response = client.post(f"{settings.API_V1_STR}/auth/login", json={"password": password})
    assert response.status_code == 200, response.text
    return response


@pytest.fixture
def client(app_overrides):
    """Unauthenticated client."""
    return TestClient(app)


@pytest.fixture
def admin_client(app_overrides):
    client = TestClient(app)
    login(client, settings.ADMIN_PASSWORD)
    return client


@pytest.fixture
def limited_client(app_overrides):
    client = TestClient(app)
    login(client, settings.LIMITED_PASSWORD)
    return client
