"""Pytest configuration and fixtures."""

import pytest
import pytest_asyncio
from fastapi import Depends, HTTPException, Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from unittest.mock import AsyncMock, MagicMock

from physiopro.core.database import build_engine, get_db
from physiopro.core.models import Base, User
from physiopro.core.seed import seed_demo_data
from physiopro.llm import LLMResponse, LLMRouter
from physiopro.observability import ObservabilityLogger


ADMIN_ID = "tm1"
CLINICIAN_ID = "doc_current"
PATIENT_USER_ID = "usr_p1"


# ---------------------------------------------------------------------------
# Observability: keep telemetry out of the working tree
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_observability(tmp_path):
    ObservabilityLogger._instance = ObservabilityLogger(log_dir=tmp_path / "logs", enabled=True)
    yield ObservabilityLogger._instance
    ObservabilityLogger._instance = None


# ---------------------------------------------------------------------------
# LLM mocks
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_llm_response():
    """Create a mock LLM response."""
    return LLMResponse(
        content='{"test": "response"}',
        model="test-model",
        usage={"input_tokens": 100, "output_tokens": 50},
    )


@pytest.fixture
def mock_llm_router():
    """Create a mock LLM router; tests set ``complete_structured`` results."""
    router = MagicMock(spec=LLMRouter)
    router.complete = AsyncMock()
    router.complete_structured = AsyncMock()
    router.health_check = AsyncMock(return_value={"primary": True, "fallback": False})
    return router


# ---------------------------------------------------------------------------
# Seeded in-memory data store
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def engine():
    eng = build_engine("sqlite+aiosqlite:///:memory:")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(eng, class_=AsyncSession, expire_on_commit=False)
    async with factory() as sess:
        await seed_demo_data(sess)
        await sess.commit()

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session(engine):
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as sess:
        yield sess


# ---------------------------------------------------------------------------
# App + client: the acting account is picked with the X-User-Id header
# ---------------------------------------------------------------------------

def as_user(user_id: str) -> dict[str, str]:
    return {"X-User-Id": user_id}


@pytest.fixture
def admin_headers():
    return as_user(ADMIN_ID)


@pytest.fixture
def clinician_headers():
    return as_user(CLINICIAN_ID)


@pytest.fixture
def patient_headers():
    return as_user(PATIENT_USER_ID)


@pytest_asyncio.fixture
async def app(engine, mock_llm_router):
    from physiopro.api.app import create_app
    from physiopro.api.dependencies import get_current_user

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _override_get_db():
        async with factory() as sess:
            try:
                yield sess
                await sess.commit()
            except Exception:
                await sess.rollback()
                raise

    async def _header_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
        user_id = request.headers.get("X-User-Id")
        user = await db.get(User, user_id) if user_id else None
        if not user:
            raise HTTPException(status_code=401, detail="Not authenticated")
        return user

    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    application.dependency_overrides[get_current_user] = _header_user
    application.state.llm_router = mock_llm_router
    return application


@pytest_asyncio.fixture
async def client(app):
    """AsyncClient bound to the app using the seeded test store."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def reset_ai_rate_limit():
    from physiopro.api.routes.ai import ai_rate_limiter

    ai_rate_limiter.reset()
    yield
    ai_rate_limiter.reset()
