import pytest
from fastapi.testclient import TestClient

from valentino import config
from valentino.database import SQLiteDatabase
from valentino.domain.store.stripe_service import MockPaymentGateway
from valentino.email_service import EmailSender
from valentino.errors import DeliveryError
from valentino.main import create_app

ADMIN_PASSWORD = "test-admin-password"
ADMIN = {"X-Admin-Password": ADMIN_PASSWORD}

BOOKING = {
    "name": "A",
    "email": "a@b.com",
    "phone": "555",
    "service_type": "Tree Removal",
    "date": "2099-01-01",
    "time": "09:00",
    "address": "1 Main St",
}


class RecordingEmailSender(EmailSender):
    """Keeps every message in memory; can be told to fail"""

    def __init__(self):
        self.confirmations = []
        self.owner_notifications = []
        self.bulk = []
        self.fail_notifications = False
        self.fail_recipients = set()

    async def send_client_confirmation(self, appointment) -> dict:
        if self.fail_notifications:
            raise DeliveryError("SMTP unavailable")
        self.confirmations.append(appointment.email)
        return {"id": f"confirmation-{appointment.id}"}

    async def send_owner_notification(self, appointment) -> dict:
        if self.fail_notifications:
            raise DeliveryError("SMTP unavailable")
        self.owner_notifications.append(appointment.id)
        return {"id": f"owner-{appointment.id}"}

    async def send_bulk(self, to: str, subject: str, html_content: str) -> bool:
        if to in self.fail_recipients:
            return False
        self.bulk.append((to, subject, html_content))
        return True

    def render_newsletter(self, subject: str, content_html: str, unsubscribe_url: str) -> str:
        return f"{content_html}\n{unsubscribe_url}"


@pytest.fixture(autouse=True)
def admin_password(monkeypatch):
    monkeypatch.setattr(config, "ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setattr(config, "BASE_URL", "http://testserver")


@pytest.fixture
def database():
    db = SQLiteDatabase("sqlite://")
    db.create_tables()
    yield db
    db.dispose()


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def payment_gateway():
    return MockPaymentGateway("http://testserver")


@pytest.fixture
def app(database, email_sender, payment_gateway):
    return create_app(
        database=database, email_sender=email_sender, payment_gateway=payment_gateway
    )


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()
