"""
Zorgam backend API client for making calls to the check-in backend service.
"""
import logging
from typing import Any, Optional

import httpx

from checkin_sync.config import ZORGAM_API_BASE_URL, ZORGAM_SESSION_TOKEN
from checkin_sync.errors import TransportError

# Envelope codes the backend uses for success.
_OK_CODES = (None, 0, 200)


def decode_body(response: httpx.Response, endpoint: str) -> Any:
    """Return the payload of ``response``, unwrapping a ``{"code", "data"}`` envelope if present.

    An empty body decodes to ``{}``. A body that is not JSON, or an envelope
    carrying an error code, raises ``TransportError``.
    """
    if not response.text:
        return {}
    try:
        data = response.json()
    except ValueError as exc:
        raise TransportError(endpoint, f"Response body is not JSON: {exc}") from exc

    if isinstance(data, dict) and "data" in data:
        code = data.get("code")
        if code not in _OK_CODES:
            logging.error(f"Zorgam backend call failed: code={code}, endpoint={endpoint}, body={data!r}")
            raise TransportError(endpoint, f"API error (code={code})")
        return data["data"]
    return data


class ZorgamBackendClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        session_token: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or ZORGAM_API_BASE_URL or "").rstrip("/")
        self.session_token = session_token if session_token is not None else ZORGAM_SESSION_TOKEN
        if not self.base_url:
            raise ValueError("###### [Zorgam backend] base URL not set")

        self.headers = {"content-type": "application/json"}
        if self.session_token:
            self.headers["authorization"] = f"Bearer {self.session_token}"
        self._transport = transport

    async def _make_request(self, method: str, endpoint: str, params=None, json_data=None) -> Any:
        """Send one request and return the decoded payload.

        httpx failures are logged with the request line and re-raised as is.
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        timeout = httpx.Timeout(30.0, connect=10.0)

        async with httpx.AsyncClient(follow_redirects=True, timeout=timeout, transport=self._transport) as client:
            try:
                response = await client.request(
                    method=method.upper(),
                    url=url,
                    params=params,
                    json=json_data,
                    headers=self.headers,
                )
                logging.info(f"{method.upper()} {url} -> {response.status_code}")
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logging.error(f"Zorgam backend {method} {url} failed with {e.response.status_code}: {e.response.text}")
                raise
            except httpx.HTTPError as e:
                logging.error(f"Zorgam backend {method} {url} not reachable ({e.__class__.__name__}): {e}")
                raise
        return decode_body(response, endpoint)
