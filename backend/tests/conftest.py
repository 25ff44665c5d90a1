import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from app.core.security import issue_session_token
from app.db.init import init_db
from app.models.enums import Role
from app.models.user import User


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory Mongo for every test."""
    await init_db(AsyncMongoMockClient())
    yield


@pytest_asyncio.fixture
async def client(db):
    from app.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def _make_user(name: str, email: str, role: Role) -> User:
    user = User(name=name, email=email, role=role)
    await user.insert()
    return user


@pytest_asyncio.fixture
async def admin(db):
    return await _make_user("Ada Admin", "ada@example.com", Role.ADMIN)


@pytest_asyncio.fixture
async def support(db):
    return await _make_user("Sam Support", "sam@example.com", Role.SUPPORT)


@pytest_asyncio.fixture
async def trader(db):
    return await _make_user("Grace Hopper", "grace@example.com", Role.USER)


@pytest.fixture
def auth_headers():
    def make(user: User) -> dict:
        return {"Authorization": f"Bearer {issue_session_token(str(user.id), user.role)}"}

    return make
