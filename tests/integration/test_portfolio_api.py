"""Integration tests for the portfolio summary endpoint."""

from decimal import Decimal

import pytest

from bitbasis.api.deps import get_price_provider
from bitbasis.api.main import app
from bitbasis.exceptions import ExternalServiceError


class _FixedPriceProvider:
    def __init__(self, price: Decimal | None) -> None:
        self.price = price
        self.calls = 0

    async def get_spot_price(self) -> Decimal:
        self.calls += 1
        if self.price is None:
            raise ExternalServiceError("CoinGecko returned 503")
        return self.price


@pytest.fixture()
async def portfolio_client(client):
    provider = _FixedPriceProvider(Decimal("50000"))
    app.dependency_overrides[get_price_provider] = lambda: provider
    for qty, cost, day in (("10", "10000", "2022-01-01"), ("5", "30000", "2023-06-01")):
        await client.post("/api/lots", json={
            "quantity": qty,
            "cost_basis_per_unit": cost,
            "acquired_at": f"{day}T00:00:00Z",
        })
    return client, provider


class TestPortfolioSummary:
    async def test_summary_with_explicit_price(self, portfolio_client):
        client, provider = portfolio_client
        resp = await client.get("/api/portfolio/summary", params={
            "current_price": "50000",
            "as_of": "2024-01-02T00:00:00",
        })
        assert resp.status_code == 200
        data = resp.json()
        assert Decimal(data["remaining_quantity"]) == Decimal("15")
        assert Decimal(data["total_cost_basis"]) == Decimal("250000")
        assert Decimal(data["current_value"]) == Decimal("750000")
        assert Decimal(data["unrealized_gain"]) == Decimal("500000")
        assert Decimal(data["long_term_quantity"]) == Decimal("10")
        assert Decimal(data["short_term_quantity"]) == Decimal("5")
        assert data["weighted_hodl_days"] == 559
        assert provider.calls == 0

    async def test_summary_uses_spot_price(self, portfolio_client):
        client, provider = portfolio_client
        resp = await client.get("/api/portfolio/summary", params={"as_of": "2024-01-02T00:00:00"})
        assert resp.status_code == 200
        assert Decimal(resp.json()["current_price"]) == Decimal("50000")
        assert provider.calls == 1

    async def test_non_positive_price_rejected(self, portfolio_client):
        client, _ = portfolio_client
        resp = await client.get("/api/portfolio/summary", params={"current_price": "0"})
        assert resp.status_code == 422

    async def test_price_service_down(self, portfolio_client):
        client, provider = portfolio_client
        provider.price = None
        resp = await client.get("/api/portfolio/summary")
        assert resp.status_code == 502
        assert resp.json()["error"] == "ExternalServiceError"
