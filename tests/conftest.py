"""
Test configuration and fixtures for the PureBreed Pork backend functions.

A throwaway SQLite database is configured through DATABASE_URL before the
application is imported; the email provider and identity provider are
replaced with in-memory fakes through dependency overrides.
"""

import os
import re
import tempfile
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

test_db_url = os.getenv("TEST_DATABASE_URL")
if test_db_url:
    if "postgresql://" in test_db_url and "asyncpg" not in test_db_url:
        test_db_url = test_db_url.replace("postgresql://", "postgresql+asyncpg://")
    os.environ["DATABASE_URL"] = test_db_url
else:
    test_db_dir = tempfile.mkdtemp()
    os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(test_db_dir, 'test.db')}"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.features.identity.services.identity_provider import get_identity_provider
from app.main import app
from app.platform.db.base import Base
from app.platform.db.session import SessionLocal, engine
from app.platform.exceptions import EmailDeliveryError, IdentityProviderError
from app.platform.services.email import get_email_client

PIN_IN_EMAIL = re.compile(r">(\d{4})</span>")


class FakeEmailClient:
    """Records outgoing mail instead of calling the email API."""

    def __init__(self):
        self.sent: list[dict] = []
        self.fail = False
        self.fail_for: set[str] = set()

    async def send(self, to_email: str, subject: str, html: str, from_name: Optional[str] = None):
        if self.fail or to_email in self.fail_for:
            raise EmailDeliveryError()
        self.sent.append(
            {"to": to_email, "subject": subject, "html": html, "from_name": from_name}
        )
        return {"id": f"email-{len(self.sent)}"}

    def last_pin(self) -> str:
        match = PIN_IN_EMAIL.search(self.sent[-1]["html"])
        assert match, "no PIN found in the last email"
        return match.group(1)


class FakeIdentityProvider:
    """In-memory stand-in for the identity provider admin API."""

    def __init__(self):
        self.users: list[dict] = []
        self.links: list[str] = []
        self.fail_on: set[str] = set()

    def add_user(self, user_id: str, email: str) -> dict:
        user = {"id": user_id, "email": email, "user_metadata": {}}
        self.users.append(user)
        return user

    def _maybe_fail(self, operation: str, message: str):
        if operation in self.fail_on:
            raise IdentityProviderError(message)

    async def list_users(self) -> list[dict]:
        self._maybe_fail("list_users", "Failed to check user")
        return list(self.users)

    async def find_user_by_email(self, email: str):
        for user in await self.list_users():
            if user["email"].lower() == email.lower():
                return user
        return None

    async def create_user(self, email: str, user_metadata: Optional[dict] = None) -> dict:
        self._maybe_fail("create_user", "Failed to create user")
        user = {"id": f"user-{len(self.users) + 1}", "email": email, "user_metadata": user_metadata or {}}
        self.users.append(user)
        return user

    async def generate_magic_link(self, email: str) -> dict:
        self._maybe_fail("generate_magic_link", "Failed to generate session")
        self.links.append(email)
        return {
            "properties": {
                "action_link": f"https://auth.example.test/verify?token=magic-{email}",
                "hashed_token": f"hashed-{email}",
                "verification_type": "magiclink",
            },
            "user": {"email": email},
        }


@pytest_asyncio.fixture
async def db_tables():
    """Recreate every table so each test starts from an empty store."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield


@pytest_asyncio.fixture
async def db(db_tables):
    async with SessionLocal() as session:
        yield session


@pytest.fixture
def email_client() -> FakeEmailClient:
    return FakeEmailClient()


@pytest.fixture
def identity() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest_asyncio.fixture
async def client(db_tables, email_client, identity):
    """HTTP client against the app with email and identity faked out."""
    app.dependency_overrides[get_email_client] = lambda: email_client
    app.dependency_overrides[get_identity_provider] = lambda: identity

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac

    app.dependency_overrides.pop(get_email_client, None)
    app.dependency_overrides.pop(get_identity_provider, None)
