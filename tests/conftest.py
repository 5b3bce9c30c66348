"""
Shared fixtures for the PassVault test suite.

Every test gets its own SQLite file database, an application built by the
factory with settings pointing at that file, and an httpx AsyncClient over
ASGITransport.
"""
import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

from passvault.app.core.config import Settings
from passvault.app.core.context import RequestContext
from passvault.app.db.base import Base
from passvault.app.db.session import create_engine_for, create_session_factory
from passvault.app.main import create_app
from passvault.app.models import User
from passvault.app.schemas.vault import UpdateItem, UploadItem
from passvault.app.security import hashing, jwt
from passvault.app.security.integrity import HasherPool

PASSWORD = "correct horse battery staple"


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'vault.db'}",
        SECRET_KEY="test-signing-key",
        TOKEN_ISSUER="passvault-test",
        INTEGRITY_HASH_KEY="test-integrity-key",
        HASHER_POOL_SIZE=2,
        CORS_ORIGINS="",
        LOG_LEVEL="WARNING",
        GZIP_MINIMUM_SIZE=500,
        MAX_INFLATED_BODY_SIZE=64 * 1024,
    )


@pytest_asyncio.fixture
async def session_factory(test_settings):
    engine = create_engine_for(test_settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(test_settings, session_factory):
    # session_factory has created the tables in the same database file
    return create_app(test_settings)


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    await app.state.engine.dispose()


async def _create_user(session_factory, login: str) -> User:
    async with session_factory() as session:
        async with session.begin():
            user = User(
                login=login,
                password_hash=hashing.get_password_hash(PASSWORD),
                encryption_salt=f"salt-of-{login}",
            )
            session.add(user)
        return user


@pytest_asyncio.fixture
async def user(session_factory) -> User:
    return await _create_user(session_factory, "alice")


@pytest_asyncio.fixture
async def other_user(session_factory) -> User:
    return await _create_user(session_factory, "bob")


@pytest.fixture
def password() -> str:
    return PASSWORD


@pytest.fixture
def ctx(user) -> RequestContext:
    return RequestContext(user_id=user.id)


@pytest.fixture
def token_for(test_settings):
    def _token_for(user_id: int) -> str:
        return jwt.create_access_token(user_id, config=test_settings)
    return _token_for


@pytest.fixture
def auth_headers(user, token_for):
    return {"Authorization": f"Bearer {token_for(user.id)}"}


@pytest.fixture
def hasher(test_settings) -> HasherPool:
    return HasherPool(test_settings.INTEGRITY_HASH_KEY, size=1)


class VaultAPI:
    """Thin client for the /api/data and /api/sync endpoints."""

    def __init__(self, client: httpx.AsyncClient, hasher: HasherPool, user_id: int, headers: dict):
        self.client = client
        self.hasher = hasher
        self.user_id = user_id
        self.headers = headers

    def upload_body(self, items, user_id=None):
        return {
            "user_id": user_id or self.user_id,
            "payload_list": items,
            "length": len(items),
            "hash": self.hasher.envelope_hash([UploadItem(**item) for item in items]),
        }

    def update_body(self, items, user_id=None):
        return {
            "user_id": user_id or self.user_id,
            "private_data_updates": items,
            "length": len(items),
            "hash": self.hasher.envelope_hash([UpdateItem(**item) for item in items]),
        }

    async def upload(self, items, user_id=None):
        return await self.client.post(
            "/api/data/", json=self.upload_body(items, user_id), headers=self.headers
        )

    async def update(self, items, user_id=None):
        return await self.client.put(
            "/api/data/update", json=self.update_body(items, user_id), headers=self.headers
        )

    async def delete(self, entries, user_id=None):
        return await self.client.request(
            "DELETE",
            "/api/data/delete",
            json={"user_id": user_id or self.user_id, "delete_entries": entries, "length": len(entries)},
            headers=self.headers,
        )

    async def download(self, client_side_ids, user_id=None):
        return await self.client.post(
            "/api/data/download",
            json={"user_id": user_id or self.user_id, "client_side_ids": client_side_ids},
            headers=self.headers,
        )

    async def all(self):
        return await self.client.get("/api/data/all", headers=self.headers)

    async def sync(self):
        return await self.client.get("/api/sync/", headers=self.headers)

    async def sync_specific(self, client_side_ids, user_id=None):
        return await self.client.post(
            "/api/sync/specific",
            json={"user_id": user_id or self.user_id, "client_side_ids": client_side_ids},
            headers=self.headers,
        )

    async def sync_plan(self, states, user_id=None):
        return await self.client.post(
            "/api/sync/plan",
            json={"user_id": user_id or self.user_id, "states": states},
            headers=self.headers,
        )


@pytest.fixture
def api(client, hasher, user, auth_headers) -> VaultAPI:
    return VaultAPI(client, hasher, user.id, auth_headers)


@pytest.fixture
def other_api(client, hasher, other_user, token_for) -> VaultAPI:
    headers = {"Authorization": f"Bearer {token_for(other_user.id)}"}
    return VaultAPI(client, hasher, other_user.id, headers)
