from dependency_injector import containers, providers

from bitbasis.config import Settings
from bitbasis.db.session import build_engine, build_session_factory
from bitbasis.infra.http.rate_limited_client import RateLimitedClient


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(modules=["bitbasis.api.deps"])

    settings = providers.Singleton(Settings)

    engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.database_url,
        echo=settings.provided.debug,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=engine,
    )

    # One HTTP client per request; the caller closes it
    price_http_client = providers.Factory(
        RateLimitedClient,
        rate_per_second=settings.provided.coingecko_rate_per_second,
        timeout=15.0,
    )
