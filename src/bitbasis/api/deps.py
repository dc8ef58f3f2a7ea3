import uuid
from typing import AsyncGenerator

from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bitbasis.container import Container
from bitbasis.infra.http.rate_limited_client import RateLimitedClient
from bitbasis.infra.price.coingecko import CoinGeckoProvider


@inject
async def get_db(
    session_factory: async_sessionmaker[AsyncSession] = Depends(Provide[Container.session_factory]),
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


async def get_user_id(
    x_user_id: uuid.UUID = Header(..., description="Authenticated user id set by the auth gateway"),
) -> uuid.UUID:
    """The session layer authenticates upstream; this only reads the resulting id."""
    return x_user_id


@inject
async def get_price_provider(
    http_client: RateLimitedClient = Depends(Provide[Container.price_http_client]),
    api_key: str = Depends(Provide[Container.settings.provided.coingecko_api_key]),
) -> AsyncGenerator[CoinGeckoProvider, None]:
    async with http_client:
        yield CoinGeckoProvider(http_client, api_key=api_key)
