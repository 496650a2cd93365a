import pytest

from insight_bench.extractors.insight import InsightAPI


class FakeClient:
    """Stands in for HttpClient: serves queued bodies per endpoint and records every call."""

    def __init__(self, pages=None, token_body=None, token_error=None, errors=None):
        self.pages = {k: list(v) for k, v in (pages or {}).items()}
        self.token_body = token_body
        self.token_error = token_error
        self.errors = errors or {}
        self.calls = []

    def get(self, endpoint, params=None):
        params = dict(params or {})
        self.calls.append((endpoint, params))
        if endpoint in self.errors:
            raise self.errors[endpoint]
        url = f"https://insight.test/v1{endpoint}?page={params.get('page')}"
        if endpoint == "/tokens":
            if self.token_error is not None:
                raise self.token_error
            return (self.token_body if self.token_body is not None else {"data": []}), url
        return self.pages[endpoint].pop(0), url

    def fetches(self, endpoint):
        return [params for path, params in self.calls if path == endpoint]


def owners(*pairs):
    return [{"owner_address": address, "balance": balance} for address, balance in pairs]


@pytest.fixture
def fake_api():
    def build(**kwargs):
        client = FakeClient(**kwargs)
        return InsightAPI(client), client

    return build
