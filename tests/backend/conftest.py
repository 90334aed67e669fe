import os

TEST_DB_URL = "sqlite://:memory:"
TEST_SECRET = "test-secret"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["JWT_SECRET"] = TEST_SECRET
os.environ["OBJECT_STORE"] = "memory"
os.environ.pop("TELEGRAM_BOT_TOKEN", None)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from image_loader.core import db as db_module
from image_loader.core.security import TokenCodec
from image_loader.domain import Identity
from image_loader.main import app
from image_loader.services.controller import Controller
from image_loader.storage.memory import MemoryAssetStore, MemoryIdentityStore, MemoryObjectStore
from image_loader.storage.tortoise_store import TortoiseAssetStore, TortoiseIdentityStore


db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


@pytest.fixture
def token_codec():
    return TokenCodec(TEST_SECRET)


@pytest_asyncio.fixture
async def db():
    """
    Initialize a clean in-memory SQLite database for every test.
    Tables are recreated from scratch.
    """
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def object_store():
    return MemoryObjectStore()


@pytest_asyncio.fixture
async def client(db, object_store, token_codec):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app.
    The app gets a controller over the SQLite-backed Tortoise stores and the
    in-memory object store (startup hooks are not run).
    """
    app.state.tokens = token_codec
    app.state.controller = Controller(
        identities=TortoiseIdentityStore(),
        assets=TortoiseAssetStore(),
        objects=object_store,
        tokens=token_codec,
        store_timeout=5,
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest.fixture
def memory_stores():
    assets = MemoryAssetStore()
    return MemoryIdentityStore(assets), assets, MemoryObjectStore()


@pytest.fixture
def controller(memory_stores, token_codec):
    """Controller over in-memory stores only (no database)."""
    identities, assets, objects = memory_stores
    return Controller(identities, assets, objects, token_codec, store_timeout=1)


@pytest_asyncio.fixture
async def alice(controller):
    return await controller.register_identity(Identity(name="Alice", login="alice", password="p1"))


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to register a user and obtain an Authorization header via the login endpoint.
    """

    async def _get_headers(login: str, password: str = "UserPass!23", name: str = "User") -> tuple[int, dict[str, str]]:
        reg = await client.post(
            "/api/v1/users",
            json={"name": name, "login": login, "password": password},
        )
        assert reg.status_code == 200, reg.text
        resp = await client.post(
            "/api/v1/auth/login",
            json={"login": login, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["data"]["accessToken"]
        return reg.json()["data"]["id"], {"Authorization": f"Bearer {token}"}

    return _get_headers
