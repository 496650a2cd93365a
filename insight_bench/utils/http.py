import logging
from typing import Any, Dict, Optional, Tuple

import requests


logger = logging.getLogger(__name__)


class InsightHTTPError(RuntimeError):
    def __init__(self, status: int, reason: str, url: str, body: str = "") -> None:
        self.status = status
        self.reason = reason
        self.url = url
        self.body = body
        super().__init__(f"HTTP {status} {reason} for {url}\n{body}")


class HttpClient:
    """Thin requests wrapper: one attempt per call, raise on any non-2xx."""

    def __init__(
        self,
        base_url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        if headers:
            self.session.headers.update(headers)

    @staticmethod
    def clean_params(params: Optional[Dict[str, Any]]) -> Dict[str, str]:
        cleaned: Dict[str, str] = {}
        for key, value in (params or {}).items():
            if value is None:
                continue
            if isinstance(value, bool):
                value = str(value).lower()
            cleaned[key] = str(value)
        return cleaned

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Tuple[Any, str]:
        url = f"{self.base_url}{endpoint}" if endpoint else self.base_url
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        if not response.ok:
            raise InsightHTTPError(response.status_code, response.reason or "", response.url, response.text)
        logger.debug("%s %s -> %s", method, response.url, response.status_code)
        return response.json(), response.url

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Tuple[Any, str]:
        return self._request("GET", endpoint, params=self.clean_params(params))

    def post(self, endpoint: str, payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Any:
        request_headers = {"content-type": "application/json"}
        request_headers.update(headers or {})
        body, _ = self._request("POST", endpoint, json=payload, headers=request_headers)
        return body
