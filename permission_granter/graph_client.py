import logging
from typing import Any, Dict, List, Optional

import requests

from .config import GRAPH_TIMEOUT


class GraphAPIError(RuntimeError):
    """HTTP error status from Graph, or no response at all (status_code None)."""

    def __init__(self, status_code: Optional[int], text: str):
        if status_code is None:
            super().__init__(f"Graph request failed: {text}")
        else:
            super().__init__(f"Graph API error {status_code}: {text}")
        self.status_code = status_code
        self.text = text


class GraphClient:
    """
    Minimal Microsoft Graph client bound to one access token.

    Owns a requests.Session; use it as a context manager so the session is
    closed when the run ends.
    """

    def __init__(self, token: str, timeout: int = GRAPH_TIMEOUT, session=None):
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
            }
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.session.close()

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logging.error("Graph request failed %s %s: %s", method, url, e)
            raise GraphAPIError(None, f"{type(e).__name__}: {e}") from e
        if resp.status_code >= 400:
            logging.error("Graph API error %s: %s", resp.status_code, resp.text)
            raise GraphAPIError(resp.status_code, resp.text)
        return resp

    def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._request("GET", url, params=params).json()

    def paged_get(
        self, url: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        items = []
        while url:
            data = self.get(url, params)
            items.extend(data.get("value", []))
            url = data.get("@odata.nextLink")
            params = None
        return items

    def patch(self, url: str, body: Dict[str, Any]) -> None:
        # Graph answers 204 No Content on a successful update
        self._request("PATCH", url, json=body)

    def post(self, url: str, body: Dict[str, Any]) -> Dict[str, Any]:
        resp = self._request("POST", url, json=body)
        return resp.json() if resp.content else {}
