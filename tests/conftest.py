import pytest

from app import create_app
from models import db
from services import AccountService

PASSWORD = "Passw0rd"


@pytest.fixture
def app():
    """Application bound to a fresh in-memory database"""
    app = create_app('testing')
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def register(client, username, email, password=PASSWORD):
    response = client.post('/auth/register', json={
        "username": username,
        "email": email,
        "password": password
    })
    assert response.status_code == 201, response.get_json()
    body = response.get_json()
    return {
        "id": body["user"]["id"],
        "username": username,
        "token": body["token"],
        "headers": {"Authorization": f"Bearer {body['token']}"}
    }


@pytest.fixture
def alice(client):
    return register(client, "alice99", "alice@x.com")


@pytest.fixture
def bob(client):
    return register(client, "bob_smith", "bob@x.com")


@pytest.fixture
def carol(client):
    return register(client, "carol", "carol@x.com")


@pytest.fixture
def make_user(app):
    """Create users directly through the account service"""
    def _make(username, email=None):
        return AccountService().register(username, email or f"{username}@example.com", PASSWORD)
    return _make


@pytest.fixture
def post_of(client):
    def _create(user, content="Hello world", **extra):
        response = client.post('/posts', json={"content": content, **extra}, headers=user["headers"])
        assert response.status_code == 201, response.get_json()
        return response.get_json()["post"]
    return _create


@pytest.fixture
def register_user(client):
    def _register(username, email, password=PASSWORD):
        return register(client, username, email, password)
    return _register
