import pytest
from httpx import ASGITransport, AsyncClient

from bitbasis.api.deps import get_db
from bitbasis.api.main import app


@pytest.fixture()
async def client(session, user_id):
    """API client bound to the test session, authenticated as `user_id`."""
    app.dependency_overrides[get_db] = lambda: session
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-User-Id": str(user_id)},
    ) as c:
        yield c
    app.dependency_overrides.clear()
