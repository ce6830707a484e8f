"""Shared fixtures for API tests."""
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import jwt
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, get_settings

TEST_JWT_SECRET = "test-secret-key-with-at-least-32-bytes!"


def make_token(sub: str, email: str | None = None, secret: str = TEST_JWT_SECRET) -> str:
    """Issue an HS256 bearer token the way the identity provider would."""
    claims = {"sub": sub}
    if email:
        claims["email"] = email
    return jwt.encode(claims, secret, algorithm="HS256")


def non_dev_settings() -> Settings:
    """Settings with auth enforced and the test JWT secret."""
    return Settings(
        _env_file=None,
        database_url="postgresql://test",
        dev_mode=False,
        jwt_secret=TEST_JWT_SECRET,
    )


@asynccontextmanager
async def create_user2_client(
    db_session: AsyncSession,
    external_id: str,
    email: str,
) -> AsyncGenerator[AsyncClient]:
    """
    Create an authenticated AsyncClient for a second user via bearer JWT.

    Overrides FastAPI dependencies to disable dev_mode, and yields an AsyncClient
    authenticated as that user. The user row is created on the first request.
    Restores the previous dependency overrides on exit, so the dev-mode
    `client` fixture works again afterwards.
    """
    from api.main import app
    from db.session import get_async_session

    get_settings.cache_clear()
    previous_overrides = dict(app.dependency_overrides)

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session
    app.dependency_overrides[get_settings] = non_dev_settings

    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url='http://test',
            headers={'Authorization': f'Bearer {make_token(external_id, email)}'},
        ) as user2_client:
            yield user2_client
    finally:
        app.dependency_overrides.clear()
        app.dependency_overrides.update(previous_overrides)


# Constant for non-existent entity ID
FAKE_UUID = "00000000-0000-0000-0000-000000000000"
