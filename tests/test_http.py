import pytest

from insight_bench.extractors.insight import InsightAPI
from insight_bench.utils.http import HttpClient, InsightHTTPError


class FakeResponse:
    def __init__(self, status_code=200, body=None, text="", url="", reason="OK"):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._body = body
        self.text = text
        self.url = url
        self.reason = reason

    def json(self):
        return self._body


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if not self.response.url:
            self.response.url = url
        return self.response


def client_with(response, **kwargs):
    client = HttpClient("https://insight.test/v1/", **kwargs)
    client.session = FakeSession(response)
    return client


def test_get_joins_base_url_and_cleans_params():
    client = client_with(FakeResponse(body={"data": []}), timeout=12)

    body, url = client.get("/tokens/owners", params={"chain_id": 1, "metadata": True, "cursor": None})

    method, requested, kwargs = client.session.requests[0]
    assert body == {"data": []}
    assert method == "GET"
    assert requested == "https://insight.test/v1/tokens/owners"
    assert kwargs["params"] == {"chain_id": "1", "metadata": "true"}
    assert kwargs["timeout"] == 12


def test_non_2xx_raises_with_status_reason_url_and_body():
    response = FakeResponse(status_code=429, reason="Too Many Requests", text='{"error":"slow down"}',
                            url="https://insight.test/v1/nfts/transfers?page=3")
    client = client_with(response)

    with pytest.raises(InsightHTTPError) as excinfo:
        client.get("/nfts/transfers", params={"page": 3})

    error = excinfo.value
    assert error.status == 429
    assert "HTTP 429 Too Many Requests for https://insight.test/v1/nfts/transfers?page=3" in str(error)
    assert "slow down" in str(error)


def test_client_id_header_is_sent_on_the_session():
    client = HttpClient("https://insight.test/v1", headers={"x-client-id": "abc"})
    assert client.session.headers["x-client-id"] == "abc"


def test_insight_api_requests_nft_owners_with_balances():
    client = client_with(FakeResponse(body={"data": []}))
    api = InsightAPI(client)

    api.get_nft_owners(1, "0xCollection", 50, 2)

    _, requested, kwargs = client.session.requests[0]
    assert requested == "https://insight.test/v1/nfts/owners/0xCollection"
    assert kwargs["params"] == {"chain_id": "1", "limit": "50", "page": "2", "include_balances": "true"}


def test_token_decimals_lookup():
    client = client_with(FakeResponse(body={"data": [{"decimals": "6", "symbol": "USDC"}]}))
    api = InsightAPI(client)

    assert api.get_token_decimals(1, "0xToken", "0xholder") == 6

    _, requested, kwargs = client.session.requests[0]
    assert requested == "https://insight.test/v1/tokens"
    assert kwargs["params"]["metadata"] == "true"
    assert kwargs["params"]["owner_address"] == "0xholder"


def test_token_decimals_missing_from_metadata():
    api = InsightAPI(client_with(FakeResponse(body={"data": []})))
    assert api.get_token_decimals(1, "0xToken", "0xholder") is None
