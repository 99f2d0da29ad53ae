import pytest

from santa_exchange import create_app
from santa_exchange.extensions import db as _db
from santa_exchange.mail import get_mailer
from santa_exchange.services.events import create_event
from santa_exchange.services.registration import register_participant


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "WTF_CSRF_ENABLED": False,
            "MAIL_SUPPRESS_SEND": True,
            "PUBLIC_BASE_URL": "https://santa.example.com",
            "LOG_LEVEL": "WARNING",
        }
    )
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def outbox(app):
    mailer = get_mailer()
    mailer.outbox.clear()
    return mailer.outbox


@pytest.fixture
def make_event(app):
    def _make(name="Office Party"):
        event, _host_key = create_event(name, "host@example.com", description="Gifts under 20")
        return event
    return _make


@pytest.fixture
def add_participants(app):
    def _add(event, names):
        return [
            register_participant(
                event,
                name=name,
                email=f"{name.lower()}@example.com",
                wishlist_q1=f"{name} likes socks",
                wishlist_q2=f"{name} likes books",
            )
            for name in names
        ]
    return _add
