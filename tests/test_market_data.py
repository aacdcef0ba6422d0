import unittest

from database import SessionLocal
from models.investment_strategy import InvestmentStrategy
from tests._support import ApiTestCase


class TestMarketData(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.user = self.make_user(username="analyst")
        self.headers = self.headers_for(self.user)

    def _upsert(self, **body):
        return self.client.post("/api/market-data", json=body, headers=self.headers)

    def test_update_requires_symbol_and_price(self):
        no_price = self._upsert(symbol="AAPL")
        self.assertEqual(no_price.status_code, 400)
        self.assertIn("currentPrice", [d["field"] for d in no_price.json()["details"]])

        no_symbol = self._upsert(currentPrice=10)
        self.assertEqual(no_symbol.status_code, 400)
        self.assertIn("symbol", [d["field"] for d in no_symbol.json()["details"]])

    def test_update_requires_auth(self):
        resp = self.client.post("/api/market-data", json={"symbol": "AAPL", "currentPrice": 1})
        self.assertEqual(resp.status_code, 401)

    def test_upsert_by_uppercased_symbol(self):
        created = self._upsert(symbol="aapl", currentPrice=190.5, name="Apple Inc.", marketCap=3e12)
        self.assertEqual(created.status_code, 200)
        self.assertEqual(created.json()["data"]["symbol"], "AAPL")

        updated = self._upsert(symbol="AAPL", currentPrice=195.0).json()["data"]
        self.assertEqual(updated["current_price"], 195.0)
        self.assertEqual(updated["name"], "Apple Inc.")

        rows = self.client.get("/api/market-data", params={"symbols": "aapl"}).json()["data"]
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["current_price"], 195.0)

    def test_listing_orders(self):
        self._upsert(symbol="MSFT", currentPrice=420, marketCap=3.1e12)
        self._upsert(symbol="AAPL", currentPrice=190, marketCap=2.9e12)
        self._upsert(symbol="GLD", currentPrice=180)

        by_cap = [r["symbol"] for r in self.client.get("/api/market-data").json()["data"]]
        self.assertEqual(by_cap, ["MSFT", "AAPL", "GLD"])

        by_symbol = self.client.get("/api/market-data", params={"symbols": "MSFT,GLD,AAPL"}).json()["data"]
        self.assertEqual([r["symbol"] for r in by_symbol], ["AAPL", "GLD", "MSFT"])

    def test_strategies_only_active(self):
        with SessionLocal() as db:
            db.add_all(
                [
                    InvestmentStrategy(name="Sukuk ladder", risk_level="conservative", created_by=self.user.id),
                    InvestmentStrategy(name="Retired idea", is_active=False),
                ]
            )
            db.commit()

        strategies = self.client.get("/api/strategies").json()["strategies"]
        self.assertEqual([s["name"] for s in strategies], ["Sukuk ladder"])
        self.assertEqual(strategies[0]["created_by_username"], "analyst")


if __name__ == "__main__":
    unittest.main()
