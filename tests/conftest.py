"""
Pytest configuration and shared fixtures.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from api.main import attach_services, create_app
from bookstore.catalog import CatalogStore
from bookstore.credentials import CredentialStore
from bookstore.database import MongoDBManager
from bookstore.models import BookCreate
from bookstore.reviews import ReviewManager
from utilities.config import BookstoreConfig


@pytest.fixture
def test_config():
    """Configuration with a fast bcrypt work factor and a fixed secret."""
    return BookstoreConfig(
        mongodb_database="bookstore_test",
        secret_key="test-secret-key-that-is-long-enough-for-hs256",
        token_expire_minutes=60,
        bcrypt_rounds=4,
        log_format="console",
        _env_file=None,
    )


@pytest.fixture
def db_manager(test_config):
    """MongoDB manager bound to an in-memory database with indexes in place."""
    manager = MongoDBManager(test_config)
    manager.bind(AsyncMongoMockClient()[test_config.mongodb_database])
    asyncio.run(manager.create_indexes())
    return manager


@pytest.fixture
def sample_book():
    """Book with no reviews."""
    return BookCreate(isbn="123", title="The Hobbit", author="J.R.R. Tolkien")


@pytest.fixture
def seeded_db(db_manager, sample_book):
    """Database holding a few books."""
    books = [
        sample_book,
        BookCreate(isbn="456", title="The Silmarillion", author="J.R.R. Tolkien"),
        BookCreate(isbn="789", title="Dune", author="Frank Herbert"),
    ]
    asyncio.run(CatalogStore(db_manager.books).import_books(books))
    return db_manager


@pytest.fixture
def catalog(seeded_db):
    return CatalogStore(seeded_db.books)


@pytest.fixture
def review_manager(seeded_db):
    return ReviewManager(seeded_db.books)


@pytest.fixture
def credential_store(db_manager, test_config):
    return CredentialStore(db_manager.users, bcrypt_rounds=test_config.bcrypt_rounds)


@pytest.fixture
def app(test_config, seeded_db):
    """Application wired to the seeded in-memory database."""
    application = create_app(test_config)
    attach_services(application, seeded_db)
    return application


@pytest.fixture
def client(app):
    """Test client; the lifespan hook is not run, services are already attached."""
    return TestClient(app)


def register_and_login(client, username, password="s3cret-pass"):
    """Register a user and return a token header for them."""
    response = client.post("/register", json={"username": username, "password": password})
    assert response.status_code == 201
    response = client.post("/login", json={"username": username, "password": password})
    assert response.status_code == 200
    return {"token": response.json()["token"]}


@pytest.fixture
def auth_headers(client):
    """Factory creating a logged-in user and returning its token header."""
    def _make(username):
        return register_and_login(client, username)
    return _make
