import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.config import get_settings
from app.database import Base, enable_sqlite_foreign_keys, get_db
from app.main import app as fastapi_app
from app.rate_limit import limiter

# Registers every table on Base.metadata
from app.progress import models as progress_models  # noqa: F401
from app.study_sets import models as study_set_models  # noqa: F401
from app.test_results import models as test_result_models  # noqa: F401

OWNER_ID = "user-owner"
OTHER_ID = "user-other"


def make_token(user_id: str) -> str:
    settings = get_settings()
    return jwt.encode({"sub": user_id}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def bearer(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as db_session:
        yield db_session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as db_session:
            try:
                yield db_session
                await db_session.commit()
            except Exception:
                await db_session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False

    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as http_client:
        yield http_client

    limiter.enabled = True
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def owner_headers():
    return bearer(OWNER_ID)


@pytest.fixture
def other_headers():
    return bearer(OTHER_ID)


@pytest.fixture
def headers_for():
    return bearer


@pytest.fixture
def owner_id():
    return OWNER_ID


@pytest.fixture
def other_id():
    return OTHER_ID
