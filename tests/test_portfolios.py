import unittest
from unittest.mock import patch

from config.settings import get_settings
from tests._support import ApiTestCase


class TestPortfolios(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.owner = self.make_user(email="owner@example.com", name="Owner", username="owner")
        self.other = self.make_user(email="other@example.com", name="Other")
        self.headers = self.headers_for(self.owner)

    def _portfolio(self, **fields):
        body = {"name": "Halal Growth", **fields}
        resp = self.client.post("/api/portfolios", json=body, headers=self.headers)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["portfolio"]

    def _holding(self, portfolio_id, **fields):
        resp = self.client.post(f"/api/portfolios/{portfolio_id}/holdings", json=fields, headers=self.headers)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["holding"]

    def _quote(self, **fields):
        resp = self.client.post("/api/market-data", json=fields, headers=self.headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["data"]

    def test_missing_name_rejected(self):
        resp = self.client.post("/api/portfolios", json={"description": "x"}, headers=self.headers)
        self.assertEqual(resp.status_code, 400)

    def test_valuation_uses_market_data_then_cost(self):
        self._quote(symbol="AAPL", currentPrice=200, change24h=2.5, changePercentage24h=1.27)
        portfolio = self._portfolio()

        aapl = self._holding(portfolio["id"], symbol="aapl", quantity=2, average_cost=150)
        msft = self._holding(portfolio["id"], symbol="MSFT", quantity=1, average_cost=300)
        self.assertEqual(aapl["symbol"], "AAPL")
        self.assertEqual(aapl["market_value"], 400.0)
        self.assertEqual(msft["market_value"], 300.0)

        detail = self.client.get(f"/api/portfolios/{portfolio['id']}", headers=self.headers).json()
        self.assertEqual(detail["portfolio"]["total_value"], 700.0)
        self.assertEqual(detail["portfolio"]["holding_count"], 2)
        self.assertEqual(detail["portfolio"]["owner_username"], "owner")
        self.assertEqual([h["symbol"] for h in detail["holdings"]], ["AAPL", "MSFT"])
        self.assertEqual(detail["holdings"][0]["change_24h"], 2.5)
        self.assertAlmostEqual(detail["holdings"][0]["return_pct"], 33.3333, places=3)
        self.assertIsNone(detail["holdings"][1]["change_24h"])

    def test_quote_update_reprices_holdings(self):
        portfolio = self._portfolio()
        self._holding(portfolio["id"], symbol="MSFT", quantity=3, average_cost=300)
        self._quote(symbol="msft", currentPrice=310)

        detail = self.client.get(f"/api/portfolios/{portfolio['id']}", headers=self.headers).json()
        self.assertEqual(detail["holdings"][0]["current_price"], 310.0)
        self.assertEqual(detail["portfolio"]["total_value"], 930.0)

    def test_remove_holding_recomputes_total(self):
        portfolio = self._portfolio()
        keep = self._holding(portfolio["id"], symbol="GLD", quantity=1, average_cost=180)
        drop = self._holding(portfolio["id"], symbol="SPUS", quantity=10, average_cost=30)

        resp = self.client.delete(f"/api/portfolios/{portfolio['id']}/holdings/{drop['id']}", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        detail = self.client.get(f"/api/portfolios/{portfolio['id']}", headers=self.headers).json()
        self.assertEqual([h["id"] for h in detail["holdings"]], [keep["id"]])
        self.assertEqual(detail["portfolio"]["total_value"], 180.0)

        missing = self.client.delete(f"/api/portfolios/{portfolio['id']}/holdings/{drop['id']}", headers=self.headers)
        self.assertEqual(missing.status_code, 404)

    def test_invalid_holding_rejected(self):
        portfolio = self._portfolio()
        resp = self.client.post(
            f"/api/portfolios/{portfolio['id']}/holdings",
            json={"symbol": "AAPL", "quantity": 0, "average_cost": 10},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 400)

    def test_private_portfolios_hidden_from_others(self):
        private = self._portfolio(name="Private")
        public = self._portfolio(name="Public", is_public=True)
        other_headers = self.headers_for(self.other)

        listed = self.client.get("/api/portfolios", params={"user_id": self.owner.id}, headers=other_headers)
        self.assertEqual([p["id"] for p in listed.json()["portfolios"]], [public["id"]])

        own = self.client.get("/api/portfolios", headers=self.headers).json()["portfolios"]
        self.assertEqual({p["id"] for p in own}, {private["id"], public["id"]})

        resp = self.client.get(f"/api/portfolios/{private['id']}", headers=other_headers)
        self.assertEqual(resp.status_code, 404)

    def test_only_owner_modifies(self):
        public = self._portfolio(is_public=True)
        other_headers = self.headers_for(self.other)
        resp = self.client.post(
            f"/api/portfolios/{public['id']}/holdings",
            json={"symbol": "AAPL", "quantity": 1, "average_cost": 10},
            headers=other_headers,
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(self.client.delete(f"/api/portfolios/{public['id']}", headers=other_headers).status_code, 403)
        self.assertEqual(self.client.delete(f"/api/portfolios/{public['id']}", headers=self.headers).status_code, 200)

    def test_listing_needs_user_when_anonymous(self):
        resp = self.client.get("/api/portfolios")
        self.assertEqual(resp.status_code, 400)

    def test_disabled_feature_hides_routes(self):
        off = get_settings().model_copy(update={"enable_investment_tracking": False})
        with patch("services.features.get_settings", return_value=off):
            resp = self.client.get("/api/portfolios", headers=self.headers)
        self.assertEqual(resp.status_code, 404)

    def test_profile_stats_include_portfolio_value(self):
        portfolio = self._portfolio()
        self._holding(portfolio["id"], symbol="GLD", quantity=2, average_cost=100)
        stats = self.client.get("/api/users/me", headers=self.headers).json()["user"]["stats"]
        self.assertEqual(stats["portfolio_count"], 1)
        self.assertEqual(stats["total_portfolio_value"], 200.0)


if __name__ == "__main__":
    unittest.main()
