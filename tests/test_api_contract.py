import unittest

from fastapi.testclient import TestClient
from pydantic import TypeAdapter

from token_swap.config.settings import Settings
from token_swap.errors import FetchError
from token_swap.main import app, configure_state
from token_swap.schemas.price import PriceObservation
from token_swap.services.balances import StaticBalanceProvider

FEED = [
    {"currency": "ETH", "date": "2024-01-01T00:00:00Z", "price": 2000},
    {"currency": "ETH", "date": "2024-01-02T00:00:00Z", "price": 2200},
    {"currency": "USDC", "date": "2024-01-01T00:00:00Z", "price": 1},
    {"currency": "ATOM", "date": "2024-01-01T00:00:00Z", "price": 8},
]


class StubFeedClient:
    def __init__(self, payload, fail: bool = False) -> None:
        self.payload = payload
        self.fail = fail
        self.calls = 0

    def fetch_observations(self):
        self.calls += 1
        if self.fail:
            raise FetchError("price feed request failed: 503")
        return TypeAdapter(list[PriceObservation]).validate_python(self.payload)


class ApiContractTest(unittest.TestCase):
    def setUp(self):
        configure_state(app, Settings(SWAP_SIMULATED_DELAY_SEC=0))
        self.feed = StubFeedClient(FEED)
        app.state.token_catalog.feed_client = self.feed
        app.state.token_catalog.aggregator.balance_provider = StaticBalanceProvider(
            {"ETH": 1.5, "USDC": 250.0, "ATOM": 40.0}
        )
        self.client = TestClient(app)

    def _load(self):
        r = self.client.post('/v1/prices/refresh')
        self.assertEqual(r.status_code, 200)
        return r

    def test_edits_rejected_before_catalog_loads(self):
        r = self.client.post('/v1/conversion/from-amount', json={'amount': '1'})
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json(), {'detail': 'CATALOG_NOT_READY'})

        status = self.client.get('/v1/prices/status').json()
        self.assertEqual(status['state'], 'IDLE')
        self.assertEqual(status['token_count'], 0)

    def test_refresh_builds_ranked_catalog_and_defaults(self):
        body = self._load().json()
        self.assertEqual(body['state'], 'READY')
        self.assertEqual(body['token_count'], 3)

        tokens = self.client.get('/v1/tokens').json()
        self.assertEqual([t['symbol'] for t in tokens], ['ETH', 'ATOM', 'USDC'])
        self.assertEqual(tokens[0]['price'], 2200)
        self.assertEqual(tokens[0]['name'], 'Ethereum')
        self.assertEqual(tokens[0]['icon_url'], '/images/tokens/ETH.svg')

        state = self.client.get('/v1/conversion').json()
        self.assertEqual(state['from_symbol'], 'ETH')
        self.assertEqual(state['to_symbol'], 'USDC')

    def test_picker_list_excludes_and_searches(self):
        self._load()

        r = self.client.get('/v1/tokens', params={'exclude': 'ETH', 'search': 'usd'})

        self.assertEqual([t['symbol'] for t in r.json()], ['USDC'])

    def test_refresh_failure_keeps_catalog_and_reports_502(self):
        self._load()
        self.feed.fail = True

        r = self.client.post('/v1/prices/refresh')

        self.assertEqual(r.status_code, 502)
        self.assertEqual(r.json(), {'detail': 'PRICE_FEED_UNAVAILABLE'})
        self.assertEqual(len(self.client.get('/v1/tokens').json()), 3)
        status = self.client.get('/v1/prices/status').json()
        self.assertEqual(status['state'], 'ERROR')
        self.assertIsNotNone(status['last_error'])

    def test_edit_flip_and_quote_flow(self):
        self._load()

        r = self.client.post('/v1/conversion/from-amount', json={'amount': '2'})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()['to_amount'], '4400.000000')

        quote = self.client.get('/v1/conversion/quote').json()
        self.assertEqual(quote['rate_text'], '1 ETH = 2200.000000 USDC')

        flipped = self.client.post('/v1/conversion/flip').json()
        self.assertEqual(flipped['from_symbol'], 'USDC')
        self.assertEqual(flipped['from_amount'], '4400.000000')
        self.assertEqual(flipped['to_amount'], '2')
        self.assertEqual(flipped['edited_field'], 'to')

        r = self.client.post('/v1/conversion/to-amount', json={'amount': 'abc'})
        self.assertEqual(r.json()['from_amount'], '')

    def test_token_selection_errors(self):
        self._load()

        same = self.client.post('/v1/conversion/to-token', json={'symbol': 'ETH'})
        self.assertEqual(same.status_code, 400)
        self.assertEqual(same.json(), {'detail': 'SAME_TOKEN_SELECTED'})

        unknown = self.client.post('/v1/conversion/from-token', json={'symbol': 'DOGE'})
        self.assertEqual(unknown.status_code, 404)
        self.assertEqual(unknown.json(), {'detail': 'UNKNOWN_TOKEN'})

        ok = self.client.post('/v1/conversion/to-token', json={'symbol': 'ATOM'})
        self.assertEqual(ok.status_code, 200)
        self.assertEqual(ok.json()['to_symbol'], 'ATOM')

    def test_max_slippage_and_exchange_rate(self):
        self._load()

        r = self.client.post('/v1/conversion/max')
        self.assertEqual(r.json()['from_amount'], '1.5')
        self.assertEqual(r.json()['to_amount'], '3300.000000')

        bad = self.client.post('/v1/conversion/slippage', json={'slippage_pct': 5})
        self.assertEqual(bad.status_code, 400)
        good = self.client.post('/v1/conversion/slippage', json={'slippage_pct': 0.1})
        self.assertEqual(good.json()['slippage_pct'], 0.1)

        rate = self.client.get('/v1/exchange-rate', params={'from_symbol': 'ETH', 'to_symbol': 'ATOM'})
        self.assertEqual(rate.json()['rate'], 275.0)
        fallback = self.client.get('/v1/exchange-rate', params={'from_symbol': 'ETH', 'to_symbol': 'DOGE'})
        self.assertEqual(fallback.json()['rate'], 1.0)

    def test_swap_submission(self):
        self._load()

        missing = self.client.post('/v1/swaps')
        self.assertEqual(missing.status_code, 400)
        self.assertEqual(missing.json(), {'detail': 'MISSING_FIELDS'})

        self.client.post('/v1/conversion/from-amount', json={'amount': '2'})
        r = self.client.post('/v1/swaps')
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body['from_symbol'], 'ETH')
        self.assertEqual(body['to_amount'], '4400.000000')

        state = self.client.get('/v1/conversion').json()
        self.assertEqual((state['from_amount'], state['to_amount']), ('', ''))

        metrics = self.client.get('/v1/metrics/prices').json()
        self.assertEqual(metrics['swaps_executed'], 1)
        self.assertEqual(metrics['swaps_rejected'], 1)
        self.assertEqual(metrics['cached_tokens'], 3)

    def test_quote_requires_both_tokens(self):
        r = self.client.get('/v1/conversion/quote')
        self.assertEqual(r.status_code, 409)


if __name__ == '__main__':
    unittest.main()
